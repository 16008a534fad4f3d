import uvicorn
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.responses import RedirectResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from picwall.config import APPNAME, VERSION, CORS_ORIGINS
from picwall.database import db, get_db
from picwall.routers import (auth_router, user_router, users_router, posts_router,
                             feed_router, images_router, logs_router)
from picwall.routers.auth.controller import authenticate_user
from picwall.routers.auth.main import issue_token
from picwall.utils.errors import register_exception_handlers
from picwall.utils.logger import configure_logging
from picwall.utils.middleware import request_context_middleware

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    db.create_tables()
    yield


# Defining the application
app = FastAPI(
    title=APPNAME,
    version=VERSION,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,  # List of allowed origins
    allow_credentials=True,      # Allow the session cookie
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)
app.middleware("http")(request_context_middleware)

register_exception_handlers(app)

# Including all the routes
app.include_router(auth_router)
app.include_router(user_router)
app.include_router(users_router)
app.include_router(posts_router)
app.include_router(feed_router)
app.include_router(images_router)
app.include_router(logs_router)


@app.get("/")
def main_function():
    """
    Redirect to documentation (`/docs/`).
    """
    return RedirectResponse(url="/docs/")


@app.post("/token")
def token(form_data: OAuth2PasswordRequestForm = Depends(), db_session: Session = Depends(get_db)):
    """
    Token generation used to make Auth in Swagger-UI work. The username field carries the email.
    """
    user = authenticate_user(db_session, form_data.username, form_data.password)
    return {"access_token": issue_token(user), "token_type": "bearer"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=5001)
