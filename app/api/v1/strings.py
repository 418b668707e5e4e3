from fastapi import APIRouter
from app.schemas.utility import CapitalizeResponse, CountResponse, SlugResponse, TextRequest
from app.services import text_utils

router = APIRouter(prefix="/strings", tags=["Strings"])

@router.post("/capitalize", response_model=CapitalizeResponse)
def capitalize(payload: TextRequest):
    return {"capitalized": text_utils.capitalize_words(payload.text)}

@router.post("/slugify", response_model=SlugResponse)
def slugify(payload: TextRequest):
    return {"slug": text_utils.slugify(payload.text)}

@router.post("/count", response_model=CountResponse)
def count_words(payload: TextRequest):
    return {"count": text_utils.count_words(payload.text)}
