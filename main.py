import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Depends, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from passlib.hash import bcrypt as bcrypt_hasher

import config
from database import Store, connect
from errors import NotFound, setup_error_handling
from schemas import Blog, BlogUpdate, UserCreate, Person, PersonUpdate

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database pool unless one was injected, close what we opened."""
    owned = app.state.store is None
    if owned:
        app.state.store = connect(config.DATABASE_URL, config.DATABASE_NAME)
        app.state.store.ensure_indexes()
    yield
    if owned:
        app.state.store.close()
        app.state.store = None


def get_store(request: Request) -> Store:
    return request.app.state.store


def hash_password(password: str) -> str:
    return bcrypt_hasher.using(rounds=config.BCRYPT_ROUNDS).hash(password)


def public_user(doc: dict) -> dict:
    return {k: v for k, v in doc.items() if k != "password_hash"}


# Fields a PUT may clear by sending null
NULLABLE_FIELDS = ("author",)


def patch_from(payload) -> dict:
    if payload is None:
        return {}
    return {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }


def create_app(store: Optional[Store] = None) -> FastAPI:
    app = FastAPI(title="Blog list API", lifespan=lifespan)
    app.state.store = store
    if store is not None:
        store.ensure_indexes()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_error_handling(app)

    @app.get("/")
    def read_root():
        return {"message": "Blog list API running"}

    @app.get("/test")
    def test_database(store: Store = Depends(get_store)):
        """Test endpoint to check if database is available and accessible"""
        response = {
            "backend": "✅ Running",
            "database": "❌ Not Available",
            "database_name": None,
            "connection_status": "Not Connected",
            "collections": [],
        }
        if store is None:
            return response
        response["database_name"] = store.name
        try:
            response["collections"] = store.collection_names()[:10]
            response["database"] = "✅ Connected & Working"
            response["connection_status"] = "Connected"
        except Exception as e:
            logger.warning("Database check failed: %s", e)
            response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
        return response

    # -------- Blogs --------
    @app.get("/api/blogs")
    def list_blogs(store: Store = Depends(get_store)):
        return store.get_documents("blog")

    @app.get("/api/blogs/{blog_id}")
    def get_blog(blog_id: str, store: Store = Depends(get_store)):
        doc = store.get_document("blog", blog_id)
        if not doc:
            raise NotFound("blog not found")
        return doc

    @app.post("/api/blogs", status_code=201)
    def create_blog(blog: Blog, store: Store = Depends(get_store)):
        return store.create_document("blog", blog)

    @app.put("/api/blogs/{blog_id}")
    def update_blog(blog_id: str, payload: Optional[BlogUpdate] = None, store: Store = Depends(get_store)):
        update = patch_from(payload)
        doc = store.update_document("blog", blog_id, update) if update else store.get_document("blog", blog_id)
        if not doc:
            raise NotFound("blog not found")
        return doc

    @app.delete("/api/blogs/{blog_id}", status_code=204)
    def delete_blog(blog_id: str, store: Store = Depends(get_store)):
        if not store.delete_document("blog", blog_id):
            logger.info("Delete of missing blog %s ignored", blog_id)
        return Response(status_code=204)

    # -------- Users --------
    @app.get("/api/users")
    def list_users(store: Store = Depends(get_store)):
        return [public_user(d) for d in store.get_documents("user")]

    @app.post("/api/users", status_code=201)
    def create_user(user: UserCreate, store: Store = Depends(get_store)):
        data = {
            "username": user.username,
            "name": user.name,
            "password_hash": hash_password(user.password),
        }
        doc = store.create_document("user", data)
        logger.info("Created user %s", user.username)
        return public_user(doc)

    # -------- Persons --------
    @app.get("/api/persons")
    def list_persons(store: Store = Depends(get_store)):
        return store.get_documents("person")

    @app.get("/api/persons/{person_id}")
    def get_person(person_id: str, store: Store = Depends(get_store)):
        doc = store.get_document("person", person_id)
        if not doc:
            raise NotFound("person not found")
        return doc

    @app.post("/api/persons", status_code=201)
    def create_person(person: Person, store: Store = Depends(get_store)):
        return store.create_document("person", person)

    @app.put("/api/persons/{person_id}")
    def update_person(person_id: str, payload: PersonUpdate, store: Store = Depends(get_store)):
        update = patch_from(payload)
        doc = store.update_document("person", person_id, update) if update else store.get_document("person", person_id)
        if not doc:
            raise NotFound("person not found")
        return doc

    @app.delete("/api/persons/{person_id}", status_code=204)
    def delete_person(person_id: str, store: Store = Depends(get_store)):
        store.delete_document("person", person_id)
        return Response(status_code=204)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    logger.info("Starting Blog list API on port %s", config.PORT)
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
