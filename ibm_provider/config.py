from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "IBM Cloud Provider"
    app_version: str = "0.1.0"
    env: str = "development"
    debug: bool = False

    # Credentials and endpoints
    ibmcloud_api_key: SecretStr = SecretStr("")
    ibmcloud_region: str = "us-south"
    iam_url: str = "https://iam.cloud.ibm.com"
    cbr_url: str = "https://cbr.cloud.ibm.com"
    vpc_url: str = ""
    vpc_api_version: str = "2021-10-12"
    vpc_generation: int = 2
    schematics_url: str = "https://schematics.cloud.ibm.com"
    resource_controller_url: str = "https://cloud.ibm.com"

    # Transport
    request_timeout_s: float = 60.0
    max_retries: int = 10
    max_retry_interval_s: float = 30.0

    # Local emulator (used instead of the real endpoints when enabled)
    use_local_emulator: bool = False
    emulator_url: str = "http://ibm-emulator.local"
    emulator_database_url: str = "sqlite+aiosqlite:///./ibm_emulator.db"

    @property
    def resolved_vpc_url(self) -> str:
        if self.vpc_url:
            return self.vpc_url
        return f"https://{self.ibmcloud_region}.iaas.cloud.ibm.com/v1"


settings = Settings()
