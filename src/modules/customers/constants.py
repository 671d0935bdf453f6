"""Customer domain constants.

Defines customer types, the default groups every shop starts with, the
field names that may be configured as required, and how edit-command
fields map onto ``Customer`` attributes.
"""

from django.db import models


class Gender(models.IntegerChoices):
    MR = 1, "Sr."
    MRS = 2, "Sra."


class RiskLevel(models.IntegerChoices):
    NONE = 1, "Nenhum"
    LOW = 2, "Baixo"
    MEDIUM = 3, "Médio"
    HIGH = 4, "Alto"


class CustomerType(models.TextChoices):
    REGISTERED = "registered", "Cliente registrado"
    GUEST = "guest", "Convidado"


class DefaultGroup(models.IntegerChoices):
    VISITOR = 1, "Visitante"
    GUEST = 2, "Convidado"
    CUSTOMER = 3, "Cliente"


class RequiredFieldName(models.TextChoices):
    """Customer fields a shop may declare mandatory per customer type."""

    GENDER = "gender", "Tratamento"
    FIRST_NAME = "first_name", "Nome"
    LAST_NAME = "last_name", "Sobrenome"
    BIRTHDAY = "birthday", "Data de nascimento"
    PARTNER_OFFERS = "partner_offers", "Ofertas de parceiros"
    NEWSLETTER = "newsletter", "Newsletter"
    COMPANY = "company", "Empresa"
    TAX_ID = "tax_id", "CNPJ"
    APE_CODE = "ape_code", "Código de atividade"
    WEBSITE = "website", "Site"


# Edit-command field -> Customer attribute, for plain value fields.
# ``password`` (hashed) and ``group_ids`` (staged M2M) are merged separately.
PROFILE_FIELD_MAP: dict[str, str] = {
    "gender": "gender",
    "first_name": "first_name",
    "last_name": "last_name",
    "email": "email",
    "birthday": "birthday",
    "is_enabled": "is_active",
    "partner_offers": "partner_offers",
    "default_group_id": "default_group_id",
    "newsletter": "newsletter",
}

B2B_FIELD_MAP: dict[str, str] = {
    "company": "company",
    "tax_id": "tax_id",
    "ape_code": "ape_code",
    "website": "website",
    "allowed_outstanding_amount": "allowed_outstanding_amount",
    "max_payment_days": "max_payment_days",
    "risk": "risk",
}

CUSTOMER_FIELD_MAP: dict[str, str] = {**PROFILE_FIELD_MAP, **B2B_FIELD_MAP}

APE_CODE_PATTERN = r"^[0-9]{3,4}[a-zA-Z]$"

# Characters rejected in first/last names.
NAME_FORBIDDEN_PATTERN = r"[0-9!<>,;?=+()@#\"°{}_$%:¤|]"

NAME_MAX_LENGTH = 255
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 5
PASSWORD_MAX_LENGTH = 72
