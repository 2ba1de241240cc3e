"""String constants stored in the database and accepted by the API."""


class CampaignType:
    NORMAL = "normal"
    EMERGENCY = "emergency"
    ALL = (NORMAL, EMERGENCY)


class FundingType:
    FIXED = "fixed"
    FLEXIBLE = "flexible"
    ALL = (FIXED, FLEXIBLE)


class CampaignStatus:
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    FUNDRAISING = "fundraising"
    IMPLEMENTATION = "implementation"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ACTIVE = "active"
    ALL = (
        PENDING_REVIEW,
        APPROVED,
        REJECTED,
        FUNDRAISING,
        IMPLEMENTATION,
        COMPLETED,
        CANCELLED,
        ACTIVE,
    )
    # counted against the creator's concurrent-campaign quota
    QUOTA = (PENDING_REVIEW, ACTIVE)
    LOCKED = (ACTIVE, COMPLETED)
    RUNNING = (FUNDRAISING, IMPLEMENTATION, ACTIVE)
    CANCELLABLE = (PENDING_REVIEW, APPROVED)


class ReviewStatus:
    PENDING = "pending"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewPriority:
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class MilestoneStatus:
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    VERIFIED = "verified"
    ALL = (PENDING, ACTIVE, COMPLETED, VERIFIED)


class DisbursementStatus:
    PENDING = "pending"
    APPROVED = "approved"
    DISBURSED = "disbursed"
    REJECTED = "rejected"
    ALL = (PENDING, APPROVED, DISBURSED, REJECTED)


class PaymentMethod:
    BANK_TRANSFER = "bank_transfer"
    CREDIT_CARD = "credit_card"
    DIGITAL_WALLET = "digital_wallet"
    CASH = "cash"
    ALL = (BANK_TRANSFER, CREDIT_CARD, DIGITAL_WALLET, CASH)


class DonationStatus:
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    ALL = (PENDING, COMPLETED, FAILED, REFUNDED)


class ExpenseReportStatus:
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    REQUIRES_REVISION = "requires_revision"
    ALL = (PENDING, UNDER_REVIEW, APPROVED, REJECTED, REQUIRES_REVISION)


class UserRole:
    USER = "user"
    ADMIN = "admin"
    DONOR = "donor"
    ORGANIZATION = "organization"
    ALL = (USER, ADMIN, DONOR, ORGANIZATION)


class UserStatus:
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    ALL = (ACTIVE, INACTIVE, SUSPENDED)


class PostVisibility:
    PUBLIC = "public"
    FOLLOWERS = "followers"
    PRIVATE = "private"
    ALL = (PUBLIC, FOLLOWERS, PRIVATE)


class PostType:
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    LINK = "link"
    MIXED = "mixed"
    ALL = (TEXT, IMAGE, VIDEO, LINK, MIXED)


class ShareType:
    REPOST = "repost"
    QUOTE = "quote"
    ALL = (REPOST, QUOTE)


class MediaType:
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"
    ALL = (IMAGE, VIDEO, AUDIO, DOCUMENT)


class MediaProvider:
    S3 = "s3"
    GOOGLE_CLOUD = "google_cloud"
    ALL = (S3, GOOGLE_CLOUD)


class MediaStatus:
    UPLOADING = "uploading"
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"
    DELETED = "deleted"
    ALL = (UPLOADING, PROCESSING, READY, FAILED, DELETED)


CATEGORY_METADATA = {
    "education": {
        "display_name": "Education",
        "description": "Schools, scholarships and learning programmes",
        "icon": "school",
        "color": "#4CAF50",
    },
    "healthcare": {
        "display_name": "Healthcare",
        "description": "Medical care and public health",
        "icon": "medical",
        "color": "#F44336",
    },
    "disaster_relief": {
        "display_name": "Disaster relief",
        "description": "Emergency relief after natural disasters",
        "icon": "warning",
        "color": "#FF9800",
    },
    "poverty": {
        "display_name": "Poverty",
        "description": "Support for people and families in hardship",
        "icon": "home",
        "color": "#9C27B0",
    },
    "environment": {
        "display_name": "Environment",
        "description": "Environmental protection and sustainable development",
        "icon": "leaf",
        "color": "#4CAF50",
    },
    "children": {
        "display_name": "Children",
        "description": "Support for children and young people",
        "icon": "child",
        "color": "#2196F3",
    },
    "elderly": {
        "display_name": "Elderly",
        "description": "Support for older people",
        "icon": "elderly",
        "color": "#607D8B",
    },
    "disability": {
        "display_name": "Disability",
        "description": "Support for people with disabilities",
        "icon": "accessibility",
        "color": "#795548",
    },
    "sick_people": {
        "display_name": "Sick people",
        "description": "Treatment costs and care for patients",
        "icon": "medical",
        "color": "#E91E63",
    },
    "construction": {
        "display_name": "Construction",
        "description": "Infrastructure and housing projects",
        "icon": "construction",
        "color": "#FF9800",
    },
    "other": {
        "display_name": "Other",
        "description": "Campaigns outside the categories above",
        "icon": "more",
        "color": "#9E9E9E",
    },
}

CATEGORIES = tuple(CATEGORY_METADATA)


def category_list() -> list[dict]:
    return [{"keyword": k, **meta} for k, meta in CATEGORY_METADATA.items()]
