from fastapi import FastAPI, WebSocket, WebSocketDisconnect, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional
import logging
import json

from config.settings import settings
from database.db import init_db, SessionLocal
from routes import auth, interview
from gateway.handler import ws_handler
from utils.security import authenticate_token

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description="Mock Interview Backend API",
    docs_url="/docs",
    openapi_url="/openapi.json"
)

# ============ CORS Middleware ============

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

logger.info(f"CORS enabled for origins: {settings.ALLOWED_ORIGINS}")

# ============ Event Handlers ============

@app.on_event("startup")
async def startup_event():
    """
    Initialize application on startup.
    - Create database tables
    - Seed default topics
    """
    try:
        init_db()
        logger.info("✅ Application started successfully")
        logger.info(f"📊 API docs available at: http://localhost:{settings.PORT}/docs")
    except Exception as e:
        logger.error(f"❌ Failed to start application: {str(e)}")
        raise

@app.on_event("shutdown")
async def shutdown_event():
    """
    Cleanup on application shutdown.
    """
    logger.info(f"❌ Application shutdown ({len(ws_handler.registry)} live sessions dropped)")

# ============ Health Check ============

@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.
    Returns application status.
    """
    return {
        "status": "healthy",
        "service": settings.API_TITLE,
        "version": settings.API_VERSION,
        "live_sessions": len(ws_handler.registry)
    }

# ============ Include Routers ============

app.include_router(auth.router)
app.include_router(interview.router)

logger.info("✅ All routers registered")

# ============ WebSocket Endpoint ============

def _bearer_from_headers(websocket: WebSocket) -> Optional[str]:
    authorization = websocket.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None

@app.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: Optional[str] = None
):
    """
    WebSocket endpoint for live mock interviews.

    Query Parameters:
        token: JWT authentication token (or send an Authorization: Bearer header)

    Client Messages:
        startInterview: {type: "startInterview", topic_id?: "...", topic_name?: "..."}
        submitAnswer: {type: "submitAnswer", previousAnswer: "..."}
        heartbeat: {type: "heartbeat"}

    Server Messages:
        interviewStarted: {type, sessionId}
        nextQuestion: {type, question, questionNumber}
        answerFeedback: {type, feedback, signal}
        interviewFinished: {type, message, status, overallScore, strengths, areasToImprove, summary, raw, transcript}
        error: {type, message}
    """
    # Authenticate user before any session exists
    db = SessionLocal()
    try:
        user = authenticate_token(token or _bearer_from_headers(websocket), db)
        user_id = user.id
    except HTTPException as e:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Auth failed")
        logger.warning(f"WebSocket authentication failed: {e.detail}")
        return
    finally:
        db.close()

    connection_id = await ws_handler.connect(websocket, user_id)

    try:
        # Message processing loop
        while True:
            data = await websocket.receive_text()

            try:
                message = json.loads(data)
            except json.JSONDecodeError as e:
                logger.error(f"Invalid JSON message: {str(e)}")
                await ws_handler.send_error(connection_id, "Invalid JSON message")
                continue

            await ws_handler.handle_message(connection_id, user_id, message)

    except WebSocketDisconnect:
        # Client disconnected
        logger.info(f"Client disconnected: {user_id}")

    except Exception as e:
        logger.error(f"WebSocket error: {str(e)}")
        try:
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR, reason="Server error")
        except RuntimeError:
            pass

    finally:
        ws_handler.disconnect(connection_id)

# ============ Root Endpoint ============

@app.get("/", tags=["root"])
async def root():
    """
    Root endpoint.
    Returns API information.
    """
    return {
        "message": "Mock Interview Backend API",
        "version": settings.API_VERSION,
        "docs": "/docs",
        "health": "/health"
    }

# ============ Run Application ============

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on {settings.HOST}:{settings.PORT}")

    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level="info"
    )
