import uvicorn
import time
import logging
from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from deploy_doctor.api.analyze_log import router as analyze_log_router
from deploy_doctor.api.auto_fix import router as auto_fix_router
from deploy_doctor.parser.known_issues import build_default_registry
from deploy_doctor.utils.logging_config import setup_logging

# Initialize enhanced logging
setup_logging(level=logging.INFO)
logger = logging.getLogger("main")

app = FastAPI(title="Deploy Doctor API")

# Built once; routers read it from app.state
app.state.registry = build_default_registry()


# ---------------------------------------------------------------------------
# Request Logging Middleware
# ---------------------------------------------------------------------------
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One summary line per request; 4xx/5xx are logged as warnings."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        route = f"{request.method} {request.url.path}"

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("[HTTP] %s crashed", route)
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(level, "[HTTP] %s -> %d (%.1fms)", route, response.status_code, elapsed_ms)
        return response


app.add_middleware(RequestLoggingMiddleware)


# Health endpoint
@app.get("/health")
async def health_check():
    return {"status": "ok", "knownIssues": app.state.registry.ids()}


# Register routers
app.include_router(analyze_log_router)
app.include_router(auto_fix_router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
