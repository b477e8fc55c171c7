"""
Record Field Constants

Field alias priority lists used by the filter/sort engine. The upstream
service has renamed several fields over time, so every logical field is
resolved through an ordered list of dotted paths; the first non-empty
value wins.
"""

from typing import ClassVar


class FilterValues:
    """Special filter values."""

    ALL = "all"
    UNASSIGNED = "unassigned"


class SortDirection:
    """Sort direction values."""

    ASC = "asc"
    DESC = "desc"


class JobFields:
    """Searchable and sortable job fields."""

    JOB_NUMBER: ClassVar[tuple[str, ...]] = ("job_number", "generated_job_id", "reference")
    CLIENT: ClassVar[tuple[str, ...]] = ("client.name", "client_name", "client_company")
    RECIPIENT: ClassVar[tuple[str, ...]] = ("recipient.name", "recipient_name", "defendant_name")
    DESCRIPTION: ClassVar[tuple[str, ...]] = ("description", "notes")

    SEARCHABLE: ClassVar[tuple[tuple[str, ...], ...]] = (
        JOB_NUMBER,
        CLIENT,
        RECIPIENT,
        DESCRIPTION,
    )

    # Sort keys (order of aliases follows the dashboard table)
    SORT_RECIPIENT: ClassVar[tuple[str, ...]] = ("recipient_name", "defendant_name", "recipient.name")
    SORT_CLIENT: ClassVar[tuple[str, ...]] = (
        "client_company",
        "client.company",
        "client.name.company",
        "client_name",
        "client.name",
        "client.name.name",
    )
    SORT_SERVER: ClassVar[tuple[str, ...]] = (
        "server_name",
        "assigned_server",
        "server.name",
        "server.name.name",
    )
    SORT_STATUS: ClassVar[tuple[str, ...]] = ("status",)
    SORT_PRIORITY: ClassVar[tuple[str, ...]] = ("priority",)
    SORT_RECEIVED: ClassVar[tuple[str, ...]] = ("created_at", "received_date")

    STATUS = "status"
    PRIORITY = "priority"
    CLIENT_ID = "client_id"
    SERVER_ID = "server_id"


class JobSortFields:
    """Sort field names accepted by the job view."""

    RECIPIENT = "recipient"
    CLIENT = "client"
    STATUS = "status"
    PRIORITY = "priority"
    SERVER = "server"
    RECEIVED_DATE = "received_date"

    DATE_FIELDS: ClassVar[frozenset[str]] = frozenset({RECEIVED_DATE})


class InvoiceFields:
    """Searchable invoice fields."""

    SEARCHABLE: ClassVar[tuple[tuple[str, ...], ...]] = (
        ("invoice_number", "number"),
        ("client.company", "client_company"),
        ("client.name", "client_name"),
    )


class ClientFields:
    """Searchable client fields."""

    SEARCHABLE: ClassVar[tuple[tuple[str, ...], ...]] = (
        ("name",),
        ("company",),
        ("email",),
    )
