import json
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Mapping, Optional

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from langchain_core.language_models.chat_models import BaseChatModel

from meeting_digest.composio import ComposioRestClient, calendar_tools
from meeting_digest.config import Settings
from meeting_digest.exceptions import (
    ConfigurationError,
    GatewayError,
    RpcError,
    TransportError,
)
from meeting_digest.gateway import GatewayClient
from meeting_digest.logging_config import setup_logging
from meeting_digest.models import Meeting
from meeting_digest.pipeline import MeetingDigest
from meeting_digest.summaries import SummaryEnricher

settings = Settings.from_env()

# Set up logging
setup_logging(log_level=settings.log_level, log_to_file=settings.log_to_file)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events"""
    logger.info("Starting Meeting Digest API")
    yield
    logger.info("Shutting down Meeting Digest API")


app = FastAPI(lifespan=lifespan, title="Meeting Digest API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Dependencies (overridden in tests)
def get_env() -> Mapping[str, str]:
    return os.environ


def get_http_client() -> Optional[httpx.AsyncClient]:
    return None


def get_llm() -> Optional[BaseChatModel]:
    return None


def error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    content = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for all unhandled exceptions"""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)[:200]}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handler for request body / query validation errors"""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"error": "Validation error", "details": jsonable_encoder(exc.errors())}
    )


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@app.get("/api/meetings")
async def get_meetings(
    env: Mapping[str, str] = Depends(get_env),
    http_client: Optional[httpx.AsyncClient] = Depends(get_http_client),
    llm: Optional[BaseChatModel] = Depends(get_llm),
):
    """Upcoming and past meetings (top 5 each), past ones with AI summaries"""
    digest = MeetingDigest(env=env, http_client=http_client, llm=llm)

    try:
        calendar_data = await digest.fetch_calendar_data()
    except GatewayError as e:
        logger.error(f"Error fetching meetings: {e}")
        return error_response(500, "Failed to fetch meetings from Google Calendar", e.message)

    return JSONResponse(content=calendar_data.to_json())


@app.get("/api/meetings/stream")
async def stream_meetings(
    env: Mapping[str, str] = Depends(get_env),
    http_client: Optional[httpx.AsyncClient] = Depends(get_http_client),
    llm: Optional[BaseChatModel] = Depends(get_llm),
):
    """
    Fetch meetings and stream progress as newline-delimited JSON.

    Each pipeline node emits a ``{"type", "content"}`` status line; the last
    line is either ``{"type": "complete", "data", "duration"}`` or
    ``{"type": "error", "error"}``.
    """
    digest = MeetingDigest(env=env, http_client=http_client, llm=llm)

    async def event_generator():
        start_time = datetime.now()
        try:
            async for event in digest.astream():
                if event["type"] == "complete":
                    duration = (datetime.now() - start_time).total_seconds()
                    logger.info(f"Meeting fetch completed in {duration:.2f}s")
                    yield json.dumps({
                        "type": "complete",
                        "data": event["data"].to_json(),
                        "duration": duration,
                    }) + "\n"
                else:
                    logger.debug(f"Status event: {event['type']} - {event['content']}")
                    yield json.dumps(event) + "\n"

        except GatewayError as e:
            logger.error(f"Error in event generator: {e}")
            yield json.dumps({"type": "error", "error": e.message}) + "\n"

    return StreamingResponse(
        event_generator(),
        media_type="application/x-ndjson",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no"  # Disable buffering for nginx
        }
    )


@app.post("/api/summarize")
async def summarize_meeting(
    meeting: Meeting,
    env: Mapping[str, str] = Depends(get_env),
    llm: Optional[BaseChatModel] = Depends(get_llm),
):
    """Generate an AI summary for a single supplied meeting"""
    enricher = SummaryEnricher(llm) if llm is not None else SummaryEnricher.from_settings(Settings.from_env(env))
    if enricher is None:
        return error_response(500, "Failed to generate AI summary", "OPENAI_API_KEY is not configured")

    try:
        summary = await enricher.generate_summary(meeting)
    except Exception as e:
        logger.error(f"Error generating AI summary: {e}", exc_info=True)
        return error_response(500, "Failed to generate AI summary", str(e)[:200])

    return {"summary": summary}


@app.get("/api/mcp-tools")
async def list_mcp_tools(
    env: Mapping[str, str] = Depends(get_env),
    http_client: Optional[httpx.AsyncClient] = Depends(get_http_client),
):
    """List the gateway's tools, highlighting the calendar ones"""
    client = GatewayClient(env=env, http_client=http_client)
    try:
        await client.connect()
        tools = await client.list_tools()
    except ConfigurationError:
        return error_response(500, "Missing COMPOSIO_API_KEY or MCP_ENDPOINT")
    except RpcError as e:
        return JSONResponse(
            status_code=500,
            content={"error": "MCP RPC Error", "details": {"message": e.rpc_message, "code": e.code}},
        )
    except TransportError as e:
        status_code = e.status or 500
        return error_response(status_code, f"MCP server error: {status_code}", e.body or e.message)
    except GatewayError as e:
        logger.error(f"Error listing MCP tools: {e}")
        return error_response(500, "Failed to list MCP tools", e.message)
    finally:
        await client.disconnect()

    return calendar_tools(tools)


async def _composio_call(env: Mapping[str, str], http_client: Optional[httpx.AsyncClient], action: str):
    api_key = Settings.from_env(env).composio_api_key
    if not api_key:
        return error_response(500, "Missing API key")

    client = ComposioRestClient(api_key, http_client=http_client)
    try:
        if action == "connections":
            return await client.list_integrations()
        return await client.list_actions()
    except TransportError as e:
        return error_response(e.status or 500, e.message, e.body)
    except httpx.HTTPError as e:
        logger.error(f"Error calling Composio API: {e}")
        return error_response(500, f"Failed to list {action}", str(e))
    finally:
        await client.close()


@app.get("/api/connections")
async def list_connections(
    env: Mapping[str, str] = Depends(get_env),
    http_client: Optional[httpx.AsyncClient] = Depends(get_http_client),
):
    """Composio integrations, and whether Google Calendar is among them"""
    return await _composio_call(env, http_client, "connections")


@app.get("/api/actions")
async def list_actions(
    env: Mapping[str, str] = Depends(get_env),
    http_client: Optional[httpx.AsyncClient] = Depends(get_http_client),
):
    """Composio Google Calendar actions, with the list/event ones picked out"""
    return await _composio_call(env, http_client, "actions")


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Meeting Digest API server")
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        log_config=None,  # Use our custom logging
        access_log=False  # Disable uvicorn access logs (we have our own)
    )
