from enum import Enum


class CategoryType(str, Enum):
    MARKET = "market"
    LFC = "lfc"
    SALAD_CLUB = "saladClub"
    PROCESSED = "processed"
    DIRECT_DELIVERY = "directDelivery"
    FLOWERS = "flowers"
    DIRECT_PRODUCE = "directProduce"
    CONSUMABLES = "consumables"
    INTER_STORE = "interStore"
    INTER_DEPARTMENT = "interDepartment"
    OTHER = "other"


class DataType(str, Enum):
    """Data types an import round can touch."""

    PURCHASE = "purchase"
    SALES = "sales"
    DISCOUNT = "discount"
    PREV_YEAR_SALES = "prevYearSales"
    PREV_YEAR_DISCOUNT = "prevYearDiscount"
    INTER_STORE_IN = "interStoreIn"
    INTER_STORE_OUT = "interStoreOut"
    FLOWERS = "flowers"
    DIRECT_PRODUCE = "directProduce"
    CONSUMABLES = "consumables"
    CATEGORY_TIME_SALES = "categoryTimeSales"
    PREV_YEAR_CATEGORY_TIME_SALES = "prevYearCategoryTimeSales"
    DEPARTMENT_KPI = "departmentKpi"
    INITIAL_SETTINGS = "initialSettings"
    BUDGET = "budget"


class ChangeType(str, Enum):
    INSERT = "insert"
    MODIFY = "modify"
    REMOVE = "remove"


class DiffAction(str, Enum):
    """User choice after reviewing an import diff."""

    OVERWRITE = "overwrite"
    KEEP_EXISTING = "keep-existing"


class FingerprintMode(str, Enum):
    SUMMARY = "summary"
    FULL = "full"
