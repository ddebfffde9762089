"""HTTP routes for the plant identification service."""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

import uvicorn
from fastapi import Body, Depends, FastAPI, File, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import pipeline
from .config import Config
from .exceptions import IdentificationError
from .facts import random_facts
from .generation import PlantInfoGenerator
from .parsing import SpeciesCandidate
from .plant_id import PlantIdClient
from .translate import translate_text
from .wikipedia import WikipediaClient

logger = logging.getLogger(__name__)


class PlantNameRequest(BaseModel):
    plantName: str


class SpeciesRequest(BaseModel):
    common_name: str
    scientific_name: str
    description: str
    image_url: str = ""


class TranslateRequest(BaseModel):
    text: str
    target: str


def get_plant_id() -> PlantIdClient:
    return PlantIdClient()


def get_generator() -> PlantInfoGenerator:
    return PlantInfoGenerator()


def get_wiki() -> WikipediaClient:
    return WikipediaClient()


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@asynccontextmanager
async def lifespan(app: FastAPI):
    for name in Config.missing_keys():
        logger.warning("%s is not set; routes that need it will return 500", name)
    yield


app = FastAPI(title="Plant Identifier API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "ok", "missing_keys": Config.missing_keys()}


@app.post("/api/identify-plant")
def identify_plant(
    images: UploadFile = File(None),
    plant_id: PlantIdClient = Depends(get_plant_id),
):
    """Proxy an image to Plant.id and return its JSON unchanged."""
    if images is None:
        logger.error("No image provided in request")
        return error_response("No image provided", 400)
    if not plant_id.configured:
        logger.error("Plant.id API key not configured")
        return error_response("Plant.id API key not configured")

    try:
        return plant_id.identify(
            images.file.read(),
            filename=images.filename or "upload.jpg",
            content_type=images.content_type or "image/jpeg",
        )
    except IdentificationError as e:
        logger.error("Error identifying plant: %s", e)
        return error_response("Failed to identify plant")


@app.post("/api/identify")
def identify(
    images: UploadFile = File(None),
    plant_id: PlantIdClient = Depends(get_plant_id),
    generator: PlantInfoGenerator = Depends(get_generator),
    wiki: WikipediaClient = Depends(get_wiki),
):
    """Identify an uploaded image and return a described plant."""
    if images is None:
        return error_response("No image provided", 400)
    if not plant_id.configured:
        return error_response("Plant.id API key not configured")
    if not generator.configured:
        return error_response("Groq API key not configured")

    result = pipeline.identify(
        images.file.read(),
        filename=images.filename or "upload.jpg",
        content_type=images.content_type or "image/jpeg",
        plant_id=plant_id,
        generator=generator,
        wiki=wiki,
    )
    if result.error:
        return error_response(result.error)
    return result.to_dict()


@app.post("/api/search-plant")
def search_plant(
    request: PlantNameRequest,
    generator: PlantInfoGenerator = Depends(get_generator),
    wiki: WikipediaClient = Depends(get_wiki),
):
    if not generator.configured:
        return error_response("Groq API key not configured")

    result = pipeline.search(request.plantName, generator=generator, wiki=wiki)
    if result.error:
        return error_response(result.error)
    return result.to_dict()


@app.post("/api/check-multiple-species")
def check_multiple_species(
    request: PlantNameRequest,
    generator: PlantInfoGenerator = Depends(get_generator),
    wiki: WikipediaClient = Depends(get_wiki),
):
    if not generator.configured:
        return error_response("Groq API key not configured")

    try:
        species = pipeline.check_multiple_species(
            request.plantName, generator=generator, wiki=wiki
        )
    except Exception:
        logger.exception("Error checking for multiple species")
        return error_response("Internal Server Error")
    return {
        "hasMultipleSpecies": bool(species),
        "speciesData": [s.to_dict() for s in species],
    }


@app.post("/api/species-details")
def species_details(
    request: SpeciesRequest,
    generator: PlantInfoGenerator = Depends(get_generator),
    wiki: WikipediaClient = Depends(get_wiki),
):
    if not generator.configured:
        return error_response("Groq API key not configured")

    candidate = SpeciesCandidate(
        common_name=request.common_name,
        scientific_name=request.scientific_name,
        description=request.description,
        image_url=request.image_url,
    )
    result = pipeline.select_species(candidate, generator=generator, wiki=wiki)
    if result.error:
        return error_response(result.error)
    return result.to_dict()


@app.post("/api/plant-details")
def plant_details(
    record: Dict[str, Any] = Body(...),
    wiki: WikipediaClient = Depends(get_wiki),
):
    """Wikipedia images and text for a record the client already holds."""
    cleaned = {str(k): str(v) for k, v in record.items() if v is not None}
    return pipeline.plant_details(cleaned, wiki=wiki).to_dict()


@app.get("/api/random-facts")
def get_random_facts(
    count: int = Query(Config.DEFAULT_FACT_COUNT, ge=1, le=20),
    generator: PlantInfoGenerator = Depends(get_generator),
    wiki: WikipediaClient = Depends(get_wiki),
):
    facts = random_facts(count, generator=generator, wiki=wiki)
    if not facts:
        return error_response("Unable to fetch facts. Please try again later.")
    return [f.to_dict() for f in facts]


@app.post("/api/translate")
def translate(request: TranslateRequest) -> Dict[str, str]:
    return {"translatedText": translate_text(request.text, request.target)}


if __name__ == "__main__":
    uvicorn.run("plant_identifier.server:app", host="127.0.0.1", port=8000, reload=True)
