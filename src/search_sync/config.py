"""Service configuration loaded from environment variables."""
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATE_FIELDS: tuple[str, ...] = ("updatedAt", "createdAt")


class FieldList(BaseModel):
    """Per-model field handling configuration.

    Only ``extra_date_fields`` is applied by the sync engine. The include,
    exclude and obfuscate lists are accepted and kept for forward
    compatibility.

    Attributes:
        include: Fields to index exclusively.
        exclude: Fields to leave out of the index.
        obfuscate: Fields to mask before indexing.
        extra_date_fields: Additional timestamp fields to expand.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)
    obfuscate: list[str] = Field(default_factory=list)
    extra_date_fields: list[str] = Field(
        default_factory=list, alias="extraDateFields"
    )


class FieldsMap(BaseModel):
    """Field expansion configuration keyed by model name.

    Attributes:
        field_settings: Opaque per-model settings strings.
        default_fields: Field lists keyed by model name.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    field_settings: dict[str, str] = Field(
        default_factory=dict, alias="fieldSettings"
    )
    default_fields: dict[str, FieldList] = Field(
        default_factory=dict, alias="defaultFields"
    )

    def date_fields(self, model_name: str) -> frozenset[str]:
        """Return every field name that should be expanded for a model.

        Args:
            model_name: Model name derived from the source table.

        Returns:
            Default date fields plus the model's configured extras.
        """
        field_list = self.default_fields.get(model_name)
        extra = field_list.extra_date_fields if field_list else []
        return frozenset((*DEFAULT_DATE_FIELDS, *extra))


class TypesenseSettings(BaseSettings):
    """Connection settings for the Typesense index backend.

    Attributes:
        host: Typesense node hostname.
        port: Typesense node port.
        protocol: "http" or "https".
        api_key: Admin API key for the node.
        connection_timeout_seconds: Per-request timeout.
        fields_map: JSON field expansion configuration (TYPESENSE_FIELDS_MAP).
    """

    model_config = SettingsConfigDict(
        env_prefix="TYPESENSE_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "localhost"
    port: int = 8108
    protocol: str = "http"
    api_key: str = ""
    connection_timeout_seconds: float = 5.0
    fields_map: FieldsMap = Field(default_factory=FieldsMap)


class Settings(BaseSettings):
    """HTTP service configuration loaded from environment variables.

    Attributes:
        host: Bind address for the HTTP server.
        port: Port number for the HTTP server.
        debug: Enable debug logging and API documentation.
        key: API key for authenticating requests.
        typesense: Index backend connection settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="SEARCH_SYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    key: str = ""

    typesense: TypesenseSettings = Field(default_factory=TypesenseSettings)
