from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    redis_url: str = "redis://localhost:6379"
    geoservice_api_key: str = ""
    socrata_app_token: str = ""

    # Upstream data services
    pluto_url: str = "https://data.cityofnewyork.us/resource/64uk-42ks.json"
    geosearch_url: str = "https://geosearch.planninglabs.nyc/v2/search"
    geoservice_url: str = "https://geoservice.planning.nyc.gov/geoservice/geoservice.svc/Function_1B"
    transit_zones_url: str = (
        "https://services5.arcgis.com/GfwWNkhOj9bNBqoJ/ArcGIS/rest/services/"
        "Transit_Zones/FeatureServer/0/query"
    )
    flood_zones_url: str = (
        "https://services.arcgis.com/P3ePLMYs2RVChkJx/arcgis/rest/services/"
        "USA_Flood_Hazard_Reduced_Set_gdb/FeatureServer/0/query"
    )

    http_timeout: float = 10.0  # seconds
    pluto_timeout: float = 15.0
    report_facts_ttl: int = 86400  # 24 hours

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "FEASIBILITY_"}


settings = Settings()
