from pydantic_settings import BaseSettings, SettingsConfigDict

# Values shipped in the sample .env; treated the same as a missing setting
PLACEHOLDER_VALUES = frozenset(
    {"YOUR_SPREADSHEET_ID_HERE", "YOUR_API_KEY_HERE", "YOUR_CLIENT_ID_HERE"}
)


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="ARCANE_", extra="ignore")

    app_name: str = "Arcane Ledger"

    # Spreadsheet store
    spreadsheet_id: str = ""
    api_key: str = ""
    client_id: str = ""

    sheets_base_url: str = "https://sheets.googleapis.com/v4/spreadsheets"
    collection_range: str = "Collection!A2:H1000"
    collection_anchor: str = "Collection!A2"
    decks_range: str = "Decks!A2:E1000"
    decks_anchor: str = "Decks!A2"

    # Authorization (implicit grant, token returned in the URL fragment)
    auth_url: str = "https://accounts.google.com/o/oauth2/v2/auth"
    auth_scope: str = "https://www.googleapis.com/auth/spreadsheets"
    redirect_uri: str = "http://localhost:5173/"
    token_lifetime_seconds: int = 3600

    # Upstream read-only services
    scryfall_url: str = "https://api.scryfall.com"
    spellbook_url: str = "https://backend.commanderspellbook.com/variants/"
    edhrec_url: str = "https://json.edhrec.com/pages/commanders"
    cardkingdom_pricelist_url: str = "https://api.cardkingdom.com/api/pricelist"

    # None means no timeout on outbound calls
    http_timeout: float | None = None

    # Sync behaviour
    save_debounce_seconds: float = 1.5

    # Combo and synergy lookups
    combo_concurrency: int = 3
    combo_lookup_limit: int = 60
    color_identity_batch_size: int = 75

    # Card image recognition
    anthropic_api_key: str = ""
    recognition_model: str = "claude-sonnet-4-20250514"

    @property
    def is_configured(self) -> bool:
        """True when every connection parameter for the spreadsheet store is present."""
        required = (self.spreadsheet_id, self.api_key, self.client_id)
        return all(value and value not in PLACEHOLDER_VALUES for value in required)


settings = Settings()
