import logging

import httpx
from fastapi import APIRouter, HTTPException

from .. import config
from ..core import ChatIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chatbot", tags=["chatbot"])

PROMPT_TEMPLATE = """You are a helpful customer support assistant for Modern Mart, an e-commerce store specializing in premium interview outfits including formal shirts, pants, ties, watches, bags, socks, and shoes.

Key information about Modern Mart:
- Free shipping on orders above ₹999 across India
- Delivery typically takes 3-7 business days
- 30-day return policy (items must be in original condition with tags)
- Products range from ₹499 to ₹2999
- Support email: {support_email}
- Support phone: +91 1800-123-4567
- Wide range of premium interview outfits

Customer message: "{message}"

Please provide a helpful, friendly, and concise response as a customer support assistant. Keep responses professional and focused on assisting with their query."""


def build_prompt(message: str) -> str:
    return PROMPT_TEMPLATE.format(support_email=config.SUPPORT_EMAIL, message=message)


async def generate_reply(prompt: str) -> str:
    url = f"{config.GEMINI_API_URL}/models/{config.GEMINI_MODEL}:generateContent"
    body = {"contents": [{"parts": [{"text": prompt}]}]}
    async with httpx.AsyncClient(timeout=30) as client:
        r = await client.post(url, params={"key": config.GEMINI_API_KEY}, json=body)
        r.raise_for_status()
        data = r.json()
    parts = data["candidates"][0]["content"]["parts"]
    return "".join(part.get("text", "") for part in parts)


@router.post("/response")
async def chatbot_response(payload: ChatIn):
    if not payload.message:
        raise HTTPException(status_code=400, detail="Message is required")
    if not config.GEMINI_API_KEY:
        raise HTTPException(status_code=503, detail="Chatbot is not configured")

    try:
        response = await generate_reply(build_prompt(payload.message))
    except (httpx.HTTPError, KeyError, IndexError) as e:
        logger.error(f"Chatbot error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"response": response}
