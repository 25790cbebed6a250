"""Catálogo de entidades administrables.

Por qué un catálogo:
- Cada pantalla del panel difiere solo en campos, reglas y rutas; aquí vive esa
  diferencia como datos, y el motor genérico (`core.services`) hace el resto.
"""

from __future__ import annotations

from core.domain.schema import EntitySchema, FieldKind, FieldSpec

# Pestañas del listado de usuarios (roleId del backend).
USER_ROLE_TABS: dict[str, int] = {
    "Clients": 4,
    "Professionals": 3,
    "Companies": 5,
    "Trainers": 6,
    "Businesses": 7,
}


BLOGS = EntitySchema(
    key="blogs",
    title="Blogs",
    base_path="admin/blogs",
    fields=(
        FieldSpec("title", "Title", required=True),
        FieldSpec("image", "Image", FieldKind.URL, required=True, accept="image/"),
        FieldSpec("textSummary", "Summary", FieldKind.LONG_TEXT, required=True),
        FieldSpec("redirectLink", "Redirect link"),
        FieldSpec("active", "Active", FieldKind.BOOLEAN),
    ),
    columns=("id", "title", "image", "textSummary", "active"),
    can_create=True,
    can_update=True,
    can_delete=True,
)

ADVERTISEMENTS = EntitySchema(
    key="advertisements",
    title="Advertisements",
    base_path="admin/advertisements",
    fields=(
        FieldSpec("adTitle", "Title", required=True),
        FieldSpec("mediaType", "Media type", FieldKind.CHOICE, choices=("IMAGE", "VIDEO")),
        FieldSpec("mediaUrl", "Media URL", FieldKind.URL, required=True, message="Media URL is required"),
        FieldSpec("redirectUrl", "Redirect URL", FieldKind.URL, required=True, message="Redirect URL is required"),
        FieldSpec("startDate", "Start Date", FieldKind.DATETIME, required=True),
        FieldSpec("endDate", "End Date", FieldKind.DATETIME, required=True),
        FieldSpec("active", "Active", FieldKind.BOOLEAN),
    ),
    columns=("id", "adTitle", "mediaType", "startDate", "endDate", "active"),
    can_create=True,
    can_update=True,
    can_delete=True,
)

NEWS_VIDEOS = EntitySchema(
    key="news-videos",
    title="News and Insights",
    base_path="admin/news-videos",
    fields=(
        FieldSpec("videoTitle", "Title", required=True),
        FieldSpec("youtubeUrl", "YouTube URL", FieldKind.URL, required=True, message="YouTube URL is required"),
        FieldSpec("active", "Active", FieldKind.BOOLEAN),
    ),
    columns=("id", "videoTitle", "youtubeUrl", "active"),
    can_create=True,
    can_update=True,
    can_delete=True,
)

JOBS = EntitySchema(
    key="jobs",
    title="Jobs",
    base_path="admin/jobs",
    fields=(
        FieldSpec("jobTitle", "Job title", required=True),
        FieldSpec("jobType", "Job type", required=True),
        FieldSpec("industryCategory", "Industry category", required=True),
        FieldSpec("region", "Region", required=True),
        FieldSpec("postcode", "Postcode", required=True),
        FieldSpec("salaryRate", "Salary rate", FieldKind.NUMBER, required=True),
        FieldSpec("salaryType", "Salary type", required=True),
        FieldSpec("jobDescription", "Job description", FieldKind.LONG_TEXT, required=True),
        FieldSpec("requiredExperience", "Required experience", FieldKind.LONG_TEXT, required=True),
        FieldSpec("requiredLicences", "Required licences", FieldKind.LONG_TEXT, required=True),
        FieldSpec("shiftAndHours", "Shift and hours", FieldKind.LONG_TEXT, required=True),
        FieldSpec("startDate", "Start date", FieldKind.DATE, required=True),
        FieldSpec("deadline", "Deadline", FieldKind.DATE, required=True),
        FieldSpec("link", "Link", required=True),
    ),
    columns=("id", "jobTitle", "jobType", "region", "salaryRate", "deadline", "user.email"),
    can_create=True,
    can_update=True,
    can_delete=True,
    owner_field="userId",
)

TENDERS = EntitySchema(
    key="tenders",
    title="Tender Board",
    base_path="tender",
    fields=(
        FieldSpec("title", "Title", required=True),
        FieldSpec("summary", "Summary", FieldKind.LONG_TEXT, required=True),
        FieldSpec("issuingAuthority", "Issuing authority", required=True),
        FieldSpec("industryType", "Industry type", required=True),
        FieldSpec("location", "Location"),
        FieldSpec("postCode", "Post code"),
        FieldSpec("contractValue", "Contract value"),
        FieldSpec("procurementReference", "Procurement reference"),
        FieldSpec("publishedDate", "Published date", FieldKind.DATE),
        FieldSpec("contractStartDate", "Contract start date", FieldKind.DATE),
        FieldSpec("contractEndDate", "Contract end date", FieldKind.DATE),
        FieldSpec("approachToMarketDate", "Approach to market date", FieldKind.DATE),
        FieldSpec("suitableForSMEs", "Suitable for SMEs", FieldKind.BOOLEAN),
        FieldSpec("suitableForVCSEs", "Suitable for VCSEs", FieldKind.BOOLEAN),
        FieldSpec("issuerName", "Issuer name"),
        FieldSpec("issuerAddress", "Issuer address"),
        FieldSpec("issuerPhone", "Issuer phone"),
        FieldSpec("issuerEmail", "Issuer email"),
        FieldSpec("issuerWebsite", "Issuer website"),
        FieldSpec("howToApply", "How to apply", FieldKind.LONG_TEXT),
    ),
    columns=("id", "title", "issuingAuthority", "industryType", "location", "publishedDate"),
    page_size_param="pageSize",
    search_param="industryType",
    can_create=True,
    can_update=True,
    can_delete=True,
    owner_field="userId",
    date_payload="midnight",
)

COURSES = EntitySchema(
    key="courses",
    title="Training Courses",
    base_path="course/course-ads",
    fields=(
        FieldSpec("title", "Title", required=True),
        FieldSpec("description", "Description", FieldKind.LONG_TEXT, required=True),
        FieldSpec("otherCourse", "Other course"),
        FieldSpec("courseType", "Course type", required=True),
        FieldSpec("courseLevel", "Course level", required=True),
        FieldSpec("duration", "Duration", required=True),
        FieldSpec("startDate", "Start date", FieldKind.DATE, required=True),
        FieldSpec("endDate", "End date", FieldKind.DATE, required=True),
        FieldSpec("location", "Location", required=True),
        FieldSpec("deliveryMethod", "Delivery method", required=True),
        FieldSpec("price", "Price", FieldKind.NUMBER, required=True),
        FieldSpec("accreditation", "Accreditation", required=True),
        FieldSpec("bookingLink", "Booking link", required=True),
    ),
    columns=("id", "title", "courseType", "courseLevel", "startDate", "price", "createdBy.email"),
    can_create=True,
    can_update=True,
    can_delete=True,
    owner_field="createdById",
)

DOCUMENTS = EntitySchema(
    key="documents",
    title="Document Verification",
    base_path="admin/documents",
    id_field="documentId",
    columns=("documentId", "userId", "status", "uploadedAt", "fileUrl"),
    status_field="status",
    status_choices=("pending", "verified", "rejected"),
)

USERS = EntitySchema(
    key="users",
    title="User Management",
    base_path="admin/users",
    rows_key="users",
    columns=("id", "firstName", "lastName", "email", "role.name", "validated", "createdAt"),
    filters=("roleId",),
    default_filters={"roleId": str(USER_ROLE_TABS["Clients"])},
)

USER_REPORTS = EntitySchema(
    key="user-reports",
    title="Report Management",
    base_path="user-reports",
    columns=("id", "reason", "reporter.email", "reported.email", "createdAt"),
    can_delete=True,
    can_view=True,
)

ORDERS = EntitySchema(
    key="orders",
    title="Orders",
    base_path="admin/orders",
    rows_key="orders",
    columns=("orderNumber", "user.email", "orderStatus", "amount", "currency", "creationDate"),
)

ACTIVITY_LOGS = EntitySchema(
    key="activity-logs",
    title="User Activity Logs",
    base_path="user-activity-logs/{scope}",
    columns=("id", "activity", "ipAddress", "userAgent", "createdAt"),
    search_param=None,
    filters=("activity", "startDate", "endDate"),
    default_filters={"activity": "login"},
)

SUBSCRIPTION_PLANS = EntitySchema(
    key="subscription-plans",
    title="Role-Based Plans",
    base_path="stripe/product/{scope}",
    rows_key=None,
    columns=("id", "name", "tier", "description"),
    search_param=None,
    paginated=False,
)

COURSE_APPLICATIONS = EntitySchema(
    key="course-applications",
    title="Course Applications",
    base_path="course-applications/postedBy/{scope}",
    columns=("id", "courseAd.title", "applicant.email", "status", "createdAt"),
    search_param=None,
    paginated=False,
    status_field="status",
    status_choices=("approved", "pending", "rejected"),
)

NOTIFICATIONS = EntitySchema(
    key="notifications",
    title="Notifications",
    base_path="notifications/user/{scope}",
    columns=("id", "type", "message", "read", "createdAt"),
    search_param=None,
    paginated=False,
)


ENTITY_SCHEMAS: dict[str, EntitySchema] = {
    schema.key: schema
    for schema in (
        ADVERTISEMENTS,
        BLOGS,
        NEWS_VIDEOS,
        JOBS,
        TENDERS,
        COURSES,
        DOCUMENTS,
        USERS,
        USER_REPORTS,
        ORDERS,
        ACTIVITY_LOGS,
        SUBSCRIPTION_PLANS,
        COURSE_APPLICATIONS,
        NOTIFICATIONS,
    )
}


def get_schema(key: str) -> EntitySchema:
    try:
        return ENTITY_SCHEMAS[key]
    except KeyError:
        known = ", ".join(sorted(ENTITY_SCHEMAS))
        raise KeyError(f"Unknown entity {key!r}. Known: {known}") from None
