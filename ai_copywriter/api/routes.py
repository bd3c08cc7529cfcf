import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from ai_copywriter.config import settings
from ai_copywriter.models.schemas import (
    AppSettings, ApplyContentRequest, ContentGenerationResult, GenerateContentRequest,
    GenerationOptions, ImageGenerationRequest, ProviderId, RegenerateContentRequest, SettingsResponse,
    ShopSession
)
from ai_copywriter.services.api_keys import ApiKeyManager
from ai_copywriter.services.app_settings import AppSettingsService
from ai_copywriter.services.container import Services
from ai_copywriter.services.content_generator import ContentGenerationService
from ai_copywriter.services.product_data import ProductDataError, ProductDataService
from ai_copywriter.utils.helpers import normalize_shop_domain

logger = logging.getLogger(__name__)
router = APIRouter()


# Dependency injection for services
def get_services(request: Request) -> Services:
    return request.app.state.services


def get_content_generator(services: Services = Depends(get_services)) -> ContentGenerationService:
    return services.content_generator


def get_product_service(services: Services = Depends(get_services)) -> ProductDataService:
    return services.products


def get_settings_service(services: Services = Depends(get_services)) -> AppSettingsService:
    return services.app_settings


def get_api_key_manager(services: Services = Depends(get_services)) -> ApiKeyManager:
    return services.api_keys


def get_shop_session(
        x_shopify_shop_domain: str = Header(None),
        x_shopify_access_token: str = Header(None)
) -> ShopSession:
    """Shop session handed over by the embedded app host"""
    if not x_shopify_shop_domain or not x_shopify_access_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Shopify session headers"
        )
    return ShopSession(shop=normalize_shop_domain(x_shopify_shop_domain), access_token=x_shopify_access_token)


def failure_response(status_code: int, error: str, error_code: Optional[str] = None) -> JSONResponse:
    """``{success: false, error}`` body the admin UI shows verbatim"""
    content = {"success": False, "error": error}
    if error_code:
        content["errorCode"] = error_code
    return JSONResponse(status_code=status_code, content=content)


def result_response(result: ContentGenerationResult) -> JSONResponse:
    """Serialize a generation result; failures go out as 400 with the error code"""
    if not result.success:
        return failure_response(
            status.HTTP_400_BAD_REQUEST,
            result.error or "Content generation failed",
            result.error_code
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "success": True,
            "content": result.content.model_dump(by_alias=True, exclude_none=True)
        }
    )


@router.post("/generate-content")
async def generate_content(
        request: GenerateContentRequest,
        session: ShopSession = Depends(get_shop_session),
        generator: ContentGenerationService = Depends(get_content_generator),
        products: ProductDataService = Depends(get_product_service),
        settings_service: AppSettingsService = Depends(get_settings_service)
):
    """
    Generate a title, description and SEO fields for a product

    **Body:**
    - productId: Numeric product id or product GID
    - length: Target word count (100-500)
    - tone: professional, casual or enthusiastic (default: professional)

    **Error Codes:**
    - 400: Generation failed; body carries error and errorCode
    - 404: Product not found
    - 422: Invalid request body
    """
    try:
        options = GenerationOptions(length=request.length, tone=request.tone)
        custom_prompt = await settings_service.get_custom_prompt(session)
        product_data = await products.get_product_by_id(session, request.product_id)

        result = await generator.generate(session, product_data, custom_prompt, options)
        if result.success:
            logger.info(f"Generated content for product {request.product_id} on {session.shop}")

        return result_response(result)

    except ProductDataError as e:
        logger.warning(f"Product {request.product_id} unavailable on {session.shop}: {e}")
        return failure_response(status.HTTP_404_NOT_FOUND, str(e))
    except Exception as e:
        logger.error(f"Error generating content for product {request.product_id}: {e}")
        return failure_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(e) or "An error occurred while generating content"
        )


@router.post("/regenerate-content")
async def regenerate_content(
        request: RegenerateContentRequest,
        session: ShopSession = Depends(get_shop_session),
        generator: ContentGenerationService = Depends(get_content_generator)
):
    """
    Revise previously generated content using merchant feedback

    **Body:**
    - productId: Product the content belongs to
    - previousContent: The content to revise
    - feedback: What to change (10-500 characters)
    - length, tone: As for generate-content
    """
    try:
        options = GenerationOptions(length=request.length, tone=request.tone)
        previous_result = ContentGenerationResult.ok(request.previous_content)

        result = await generator.regenerate(session, previous_result, request.feedback, options)
        return result_response(result)

    except Exception as e:
        logger.error(f"Error regenerating content for product {request.product_id}: {e}")
        return failure_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(e) or "An error occurred while regenerating content"
        )


@router.post("/generate-from-image")
async def generate_from_image(
        request: ImageGenerationRequest,
        session: ShopSession = Depends(get_shop_session),
        generator: ContentGenerationService = Depends(get_content_generator),
        products: ProductDataService = Depends(get_product_service),
        settings_service: AppSettingsService = Depends(get_settings_service)
):
    """
    Generate product copy from a product photo (OpenAI only)
    """
    try:
        options = GenerationOptions(
            length=request.length, tone=request.tone, include_keywords=request.include_keywords
        )
        custom_prompt = await settings_service.get_custom_prompt(session)
        store_context = await products.get_store_context(session)

        result = await generator.generate_from_image(session, request.image_url, store_context, custom_prompt, options)
        return result_response(result)

    except ProductDataError as e:
        logger.warning(f"Store context unavailable for {session.shop}: {e}")
        return failure_response(status.HTTP_502_BAD_GATEWAY, str(e))
    except Exception as e:
        logger.error(f"Error generating content from image on {session.shop}: {e}")
        return failure_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(e) or "An error occurred while generating content from the image"
        )


@router.post("/apply-content")
async def apply_content(
        request: ApplyContentRequest,
        session: ShopSession = Depends(get_shop_session),
        products: ProductDataService = Depends(get_product_service)
):
    """
    Write generated content to the product
    """
    if not request.content.title or not request.content.description:
        return failure_response(status.HTTP_400_BAD_REQUEST, "Content must include a title and a description")

    updated = await products.update_product_content(session, request.product_id, request.content)
    if not updated:
        return failure_response(status.HTTP_400_BAD_REQUEST, "Failed to update product")

    return {"success": True, "productId": request.product_id}


@router.get("/settings")
async def get_settings(
        session: ShopSession = Depends(get_shop_session),
        settings_service: AppSettingsService = Depends(get_settings_service)
):
    """
    Load the merchant's settings, creating metafield definitions on first use
    """
    try:
        loaded = await settings_service.load(session)
        return {"settings": loaded.to_payload()}
    except Exception as e:
        logger.error(f"Error loading settings for {session.shop}: {e}")
        fallback = SettingsResponse(
            api_provider=ProviderId.OPENAI.value,
            has_api_key=False,
            custom_prompt="",
            default_length=settings.DEFAULT_CONTENT_LENGTH
        )
        return {"error": "Error loading settings. Please try again.", "settings": fallback.to_payload()}


@router.post("/settings")
async def save_settings(
        app_settings: AppSettings,
        session: ShopSession = Depends(get_shop_session),
        settings_service: AppSettingsService = Depends(get_settings_service)
):
    """
    Save provider, API key, custom prompt and default length
    """
    try:
        saved = await settings_service.save(session, app_settings)
    except Exception as e:
        logger.error(f"Error saving settings for {session.shop}: {e}")
        return failure_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(e) or "An error occurred while saving settings"
        )

    if not saved:
        return failure_response(status.HTTP_400_BAD_REQUEST, "Some settings could not be saved")

    return {"success": True}


@router.delete("/api-key/{provider}")
async def delete_api_key(
        provider: ProviderId,
        session: ShopSession = Depends(get_shop_session),
        api_keys: ApiKeyManager = Depends(get_api_key_manager)
):
    """
    Remove the stored API key if it belongs to ``provider``
    """
    deleted = await api_keys.delete(session, provider.value)
    return {"success": deleted}


@router.get("/test")
async def test_endpoint():
    """Connectivity check used by the admin extension"""
    logger.info("Test API endpoint called")
    return {
        "success": True,
        "message": "API is working",
        "timestamp": datetime.now().isoformat()
    }
