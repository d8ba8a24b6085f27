#!/usr/bin/env python3
"""
NHTSA Gateway Server

Exposes VIN decode and recall lookups as a small REST API, so shop tools
can get a clean Year/Make/Model/Trim/Engine line without dealing with the
raw vPIC tables.

Usage:
    python -m nhtsa_gateway.server --port 8328 [--config gateway.json]

Endpoints:
    GET /                                       status
    GET /vin/{vin}?model_year=2006              decoded profile
    GET /vin/{vin}/raw                          filtered decode table
    GET /recalls/{model_year}/{make}/{model}    recall list
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from nhtsa_gateway import __version__
from nhtsa_gateway.client import NHTSAClient
from nhtsa_gateway.config import ClientConfig, load_config

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Global client instance, created in lifespan
_client: Optional[NHTSAClient] = None
_config: ClientConfig = ClientConfig()


# =============================================================================
# Pydantic Models
# =============================================================================

class StatusResponse(BaseModel):
    service: str
    version: str

class VehicleProfileResponse(BaseModel):
    vin: str
    model_year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    trim: str = ""
    engine: str = ""
    description: str = ""

class VariableResponse(BaseModel):
    variable_id: int
    variable: str
    value: str
    value_id: Optional[int] = None

class RecallResponse(BaseModel):
    campaign_number: str
    components: List[str]
    date: str  # YYYY-MM-DD
    description: str
    remedy: str


# =============================================================================
# FastAPI App
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    global _client
    logger.info("NHTSA Gateway starting...")
    _client = NHTSAClient(_config)
    yield
    if _client:
        await _client.close()
        _client = None
        logger.info("NHTSA client closed on shutdown")

app = FastAPI(
    title="NHTSA Gateway",
    description="VIN decode and safety recall lookups",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_client() -> NHTSAClient:
    """Get the shared NHTSA client."""
    if _client is None:
        raise HTTPException(status_code=503, detail="Gateway not ready")
    return _client


# =============================================================================
# Endpoints
# =============================================================================

@app.get("/", response_model=StatusResponse)
async def status():
    """Service status."""
    return StatusResponse(service="nhtsa-gateway", version=__version__)


@app.get("/vin/{vin}", response_model=VehicleProfileResponse)
async def decode_vin(vin: str, model_year: Optional[int] = None,
                     client: NHTSAClient = Depends(get_client)):
    """Decode a VIN into a vehicle profile."""
    profile = await client.decode(vin, model_year)
    if profile is None:
        raise HTTPException(status_code=404, detail=f"Could not decode VIN {vin}")

    return VehicleProfileResponse(vin=vin.upper(), description=str(profile), **profile.to_dict())


@app.get("/vin/{vin}/raw", response_model=List[VariableResponse])
async def decode_vin_raw(vin: str, model_year: Optional[int] = None,
                         client: NHTSAClient = Depends(get_client)):
    """Filtered vPIC variables for a VIN, ordered by variable id."""
    table = await client.decode_vin(vin, model_year)
    if not table:
        raise HTTPException(status_code=404, detail=f"Could not decode VIN {vin}")

    return [
        VariableResponse(variable_id=row.id, variable=row.name, value=row.value, value_id=row.value_id)
        for _, row in sorted(table.items())
    ]


@app.get("/recalls/{model_year}/{make}/{model}", response_model=List[RecallResponse])
async def get_recalls(model_year: int, make: str, model: str,
                      client: NHTSAClient = Depends(get_client)):
    """Safety recalls for a vehicle."""
    records = await client.recalls(model_year, make, model)
    if records is None:
        raise HTTPException(status_code=404, detail=f"No recalls found for {model_year} {make} {model}")

    return [RecallResponse(**r.to_dict()) for r in records]


# =============================================================================
# Main Entry Point
# =============================================================================

def main(argv: Optional[List[str]] = None) -> None:
    import argparse
    import uvicorn

    global _config

    parser = argparse.ArgumentParser(description="NHTSA Gateway")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8328, help="Port to listen on")
    parser.add_argument("--config", default=None, help="JSON config file")
    args = parser.parse_args(argv)

    _config = load_config(args.config)
    logger.info(f"Using decode endpoint {_config.decode_url}, recalls endpoint {_config.recalls_url}")

    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
