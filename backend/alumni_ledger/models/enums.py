import enum


class RoleName(str, enum.Enum):
    admin = "admin"
    treasurer = "treasurer"
    alumni = "alumni"


class Bucket(str, enum.Enum):
    lift = "LIFT"
    alumni_association = "ALUMNI_ASSOCIATION"


class ContributionType(str, enum.Enum):
    basic = "BASIC"
    additional = "ADDITIONAL"


class EntryKind(str, enum.Enum):
    contribution = "CONTRIBUTION"
    expense = "EXPENSE"


class EntryStatus(str, enum.Enum):
    pending = "PENDING"
    approved = "APPROVED"
    rejected = "REJECTED"


class AuditAction(str, enum.Enum):
    approved = "APPROVED"
    rejected = "REJECTED"
    edited = "EDITED"
