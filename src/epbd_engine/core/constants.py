"""Domain vocabulary, metadata keys and generated-row comments.

All enumerations are ``str`` enums whose values are the regulatory tokens
used in the text tables (CTE DB-HE / EN ISO 52000-1 naming).

CARRIERS:
- ELECTRICIDAD: electricity
- MEDIOAMBIENTE: ambient/environmental energy (heat pumps, solar thermal)
- RED1, RED2: district networks 1 and 2 (user definable factors)
- BIOMASA, BIOMASADENSIFICADA: solid biomass, densified biomass (pellets)
- Rest: fossil fuels and biofuels

SIGN CONVENTIONS:
- Component values are non-negative energy quantities (kWh) per timestep.
- CONSUMO rows are energy used by the building, PRODUCCION rows energy
  produced on site or by cogeneration.
- RenNren pairs are primary energy (kWh or kWh/m2), ren + nren = total.
"""

from enum import Enum


class Carrier(str, Enum):
    """Energy carrier."""

    BIOCARBURANTE = "BIOCARBURANTE"
    BIOMASA = "BIOMASA"
    BIOMASADENSIFICADA = "BIOMASADENSIFICADA"
    CARBON = "CARBON"
    ELECTRICIDAD = "ELECTRICIDAD"
    FUELOIL = "FUELOIL"
    GASNATURAL = "GASNATURAL"
    GASOLEO = "GASOLEO"
    GLP = "GLP"
    MEDIOAMBIENTE = "MEDIOAMBIENTE"
    RED1 = "RED1"
    RED2 = "RED2"

    def __str__(self) -> str:
        return self.value


class Source(str, Enum):
    """Origin of the energy delivered into a carrier."""

    RED = "RED"
    INSITU = "INSITU"
    COGENERACION = "COGENERACION"

    def __str__(self) -> str:
        return self.value


class Dest(str, Enum):
    """Destination of the energy: supply to the building or export."""

    SUMINISTRO = "SUMINISTRO"
    A_RED = "A_RED"
    A_NEPB = "A_NEPB"

    def __str__(self) -> str:
        return self.value


class Step(str, Enum):
    """Calculation step (A: delivery/export, B: export credit)."""

    A = "A"
    B = "B"

    def __str__(self) -> str:
        return self.value


class CType(str, Enum):
    """Component type."""

    CONSUMO = "CONSUMO"
    PRODUCCION = "PRODUCCION"

    def __str__(self) -> str:
        return self.value


class CSubtype(str, Enum):
    """Component subtype."""

    EPB = "EPB"
    NEPB = "NEPB"
    INSITU = "INSITU"
    COGENERACION = "COGENERACION"

    def __str__(self) -> str:
        return self.value


class Service(str, Enum):
    """Building end use. NDEF marks energy not assigned to any service."""

    ACS = "ACS"  # domestic hot water
    CAL = "CAL"  # heating
    REF = "REF"  # cooling
    VEN = "VEN"  # ventilation
    ILU = "ILU"  # lighting
    HU = "HU"  # humidification
    DHU = "DHU"  # dehumidification
    BAC = "BAC"  # building automation and control
    NDEF = "NDEF"

    def __str__(self) -> str:
        return self.value


# Valid subtypes for each component type
CTYPE_SUBTYPES = {
    CType.CONSUMO: (CSubtype.EPB, CSubtype.NEPB),
    CType.PRODUCCION: (CSubtype.INSITU, CSubtype.COGENERACION),
}

# (carrier, source) pairs that may export energy and need A_RED / A_NEPB factors
EXPORT_CARRIERS = [
    (Carrier.ELECTRICIDAD, Source.INSITU),
    (Carrier.ELECTRICIDAD, Source.COGENERACION),
    (Carrier.MEDIOAMBIENTE, Source.INSITU),
]

# Carriers always inside the nearby perimeter (solid biomass only, see EN ISO 52000-1 B.23)
NEARBY_CARRIERS = frozenset(
    {
        Carrier.BIOMASA,
        Carrier.BIOMASADENSIFICADA,
        Carrier.RED1,
        Carrier.RED2,
        Carrier.MEDIOAMBIENTE,
    }
)

# Metadata keys
META_COGEN = "CTE_COGEN"
META_COGENNEPB = "CTE_COGENNEPB"
META_RED1 = "CTE_RED1"
META_RED2 = "CTE_RED2"
META_PERIMETER = "CTE_PERIMETRO"
META_SERVICE = "CTE_SERVICIO"
META_LOCATION = "CTE_LOCALIZACION"

PERIMETER_NEARBY = "NEARBY"

# Comments attached to generated rows
COMMENT_MA_INSITU = "Recursos usados para obtener energía térmica del medioambiente"
COMMENT_MA_RED = "Recursos usados para obtener energía térmica del medioambiente (red ficticia)"
COMMENT_EL_INSITU = "Recursos usados para generar electricidad in situ"
COMMENT_COGEN_SUPPLY = (
    "Factor de paso generado (el impacto de la cogeneración se tiene en cuenta "
    "en el vector de suministro)"
)
COMMENT_TO_GRID_A = "Recursos usados para producir la energía exportada a la red"
COMMENT_TO_NEPB_A = "Recursos usados para producir la energía exportada a usos no EPB"
COMMENT_COGEN_TO_GRID_A = (
    "Recursos usados para producir la electricidad cogenerada y exportada a la red "
    "(ver EN ISO 52000-1 9.6.6.2.3)"
)
COMMENT_COGEN_TO_NEPB_A = (
    "Recursos usados para producir la electricidad cogenerada y exportada a usos no EPB "
    "(ver EN ISO 52000-1 9.6.6.2.3)"
)
COMMENT_TO_GRID_B = (
    "Recursos ahorrados a la red por la energía producida in situ y exportada a la red"
)
COMMENT_TO_NEPB_B = (
    "Recursos ahorrados a la red por la energía producida in situ y exportada a usos no EPB"
)
COMMENT_RED1 = (
    "Recursos usados para suministrar energía de la red de distrito 1 (definible por el usuario)"
)
COMMENT_RED2 = (
    "Recursos usados para suministrar energía de la red de distrito 2 (definible por el usuario)"
)
COMMENT_DEFAULT_VALUE = "(Valor predefinido)"
COMMENT_USER_VALUE = "(Valor de usuario)"
COMMENT_BALANCED_MA = "Equilibrado de energía térmica insitu consumida y sin producción declarada"
COMMENT_REASSIGNED = "Producción insitu proporcionalmente reasignada al servicio."
COMMENT_NEARBY_PREFIX = "Perímetro nearby: "

# Tolerance for numerical comparisons
NUMERICAL_TOLERANCE = 1e-6
