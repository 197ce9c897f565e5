from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse
from starlette.requests import Request
from dotenv import load_dotenv
import logging
import sys

load_dotenv()

from routes.learning_routes import router as learning_router
from utils.exceptions import LearnFlowError

# Configure logging
logger = logging.getLogger(__name__)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)

# FastAPI App
app = FastAPI(title="LearnFlow API")


@app.exception_handler(LearnFlowError)
async def learnflow_exception_handler(request: Request, exc: LearnFlowError):
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc.error_code} {exc.message}")
    else:
        logger.info(f"{request.url.path} rejected: {exc.error_code} {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())},
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(learning_router)


@app.get("/")
async def root():
    return {"greeting": "Hello!", "message": "Welcome to LearnFlow!"}


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
