import logging
import os
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from pymongo.database import Database
from pymongo.errors import PyMongoError

import database
from auth import is_admin
from database import (
    PROPOSALS,
    TESTIMONIALS,
    USERS,
    create_document,
    find_user,
    get_db,
    get_documents,
    insert_result,
    update_result,
)
from schemas import ProfileUpdate, TestimonialAction, TestimonialPayload, UserPayload
from uploads import UPLOAD_DIR, ensure_upload_dir, save_upload

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Digital Site Pro")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ensure_upload_dir()
app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR, check_dir=False), name="uploads")

FORBIDDEN = {"error": "Forbidden"}
TESTIMONIAL_NOT_FOUND = {"error": "Testimonial not found."}


async def internal_error_handler(request: Request, exc: Exception):
    logger.error("Error handling %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# Database, bad-id and unavailable-database errors are answered here without
# being re-raised; anything else still reaches the catch-all below.
for _error in (PyMongoError, InvalidId, RuntimeError):
    app.add_exception_handler(_error, internal_error_handler)
app.add_exception_handler(Exception, internal_error_handler)


@app.on_event("startup")
def startup():
    database.connect()


@app.on_event("shutdown")
def shutdown():
    database.close()


def _serialize(docs):
    """ObjectId -> hex string, datetime -> ISO-8601"""
    return jsonable_encoder(docs, custom_encoder={ObjectId: str})


@app.get("/", response_class=PlainTextResponse)
def read_root():
    return "Digital Site Pro Server Is Online"


# -----------------------------
# Users
# -----------------------------

@app.post("/users")
def create_user(payload: UserPayload, db: Database = Depends(get_db)):
    result = create_document(db, USERS, payload.document())
    return insert_result(result)


@app.put("/users")
def upsert_user(payload: UserPayload, db: Database = Depends(get_db)):
    user = payload.document()
    result = db[USERS].update_one({"email": user.get("email")}, {"$set": user}, upsert=True)
    return update_result(result)


@app.get("/users/phone/{email}")
def get_phone(email: str, db: Database = Depends(get_db)):
    user = find_user(db, email)
    if not user:
        return JSONResponse(status_code=404, content={"message": "User not found"})
    if not user.get("phoneNumber"):
        return JSONResponse(status_code=404, content={"message": "User does not have a phone number"})
    return {"phoneNumber": user["phoneNumber"]}


@app.get("/users/{email}")
def get_admin_flag(email: str, db: Database = Depends(get_db)):
    # Unknown users are simply not admins
    return {"admin": is_admin(db, email)}


@app.post("/users/{email}")
def update_profile(email: str, payload: Optional[ProfileUpdate] = None, db: Database = Depends(get_db)):
    update_fields = (payload or ProfileUpdate()).update_fields()
    # An empty $set is rejected by older servers; $setOnInsert keeps the upsert
    update = {"$set": update_fields} if update_fields else {"$setOnInsert": {"email": email}}
    result = db[USERS].update_one({"email": email}, update, upsert=True)

    if result.modified_count > 0 or result.upserted_id is not None:
        logger.info("User updated successfully")
        return {"message": "User updated successfully"}
    logger.info("No changes made to the user")
    return {"message": "No changes made to the user"}


# -----------------------------
# Testimonials
# -----------------------------

@app.get("/testimonialapprove/{email}")
def list_pending_testimonials(email: str, db: Database = Depends(get_db)):
    if not is_admin(db, email):
        return JSONResponse(status_code=403, content=FORBIDDEN)
    pending = get_documents(db, TESTIMONIALS, {"approved": {"$exists": False}})
    return _serialize(pending)


@app.put("/testimonialapprove")
def approve_testimonial(payload: TestimonialAction, db: Database = Depends(get_db)):
    if not is_admin(db, payload.user_email):
        return JSONResponse(status_code=403, content=FORBIDDEN)

    # upsert=True: an unmatched id inserts a new, already approved document
    result = db[TESTIMONIALS].update_one(
        {"_id": ObjectId(payload.id)},
        {"$set": {"approved": True}},
        upsert=True,
    )
    if result.upserted_id is None and result.modified_count != 1:
        return JSONResponse(status_code=404, content=TESTIMONIAL_NOT_FOUND)
    return _serialize(get_documents(db, TESTIMONIALS))


@app.delete("/testimonialapprove")
def delete_testimonial(payload: TestimonialAction, db: Database = Depends(get_db)):
    if not is_admin(db, payload.user_email):
        return JSONResponse(status_code=403, content=FORBIDDEN)

    result = db[TESTIMONIALS].delete_one({"_id": ObjectId(payload.id)})
    if result.deleted_count != 1:
        return JSONResponse(status_code=404, content=TESTIMONIAL_NOT_FOUND)
    return _serialize(get_documents(db, TESTIMONIALS))


@app.post("/testimonial")
def create_testimonial(payload: TestimonialPayload, db: Database = Depends(get_db)):
    result = create_document(db, TESTIMONIALS, payload.document())
    return insert_result(result)


# -----------------------------
# Proposals
# -----------------------------

@app.post("/makeproposal")
def make_proposal(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phoneNumber: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    details: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: Database = Depends(get_db),
):
    # Browsers send an empty part with no filename when nothing was chosen
    if file is not None and not file.filename:
        file = None
    proposal = {
        "name": name,
        "email": email,
        "phoneNumber": phoneNumber,
        "category": category,
        "details": details,
        "filePath": save_upload(file, "file") if file is not None else None,
        "createdAt": datetime.now(timezone.utc),
    }
    result = create_document(db, PROPOSALS, proposal)
    return {"success": True, "data": insert_result(result)}


@app.get("/makeproposal/{email}")
def list_user_proposals(email: str, db: Database = Depends(get_db)):
    return _serialize(get_documents(db, PROPOSALS, {"email": email}))


@app.get("/makeproposal")
def list_all_proposals(email: Optional[str] = None, db: Database = Depends(get_db)):
    if not is_admin(db, email):
        return JSONResponse(status_code=403, content={"message": "Access denied. User is not an admin."})
    return _serialize(get_documents(db, PROPOSALS))


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 5000))
    logger.info("Listening at http://localhost:%s", port)
    uvicorn.run(app, host="0.0.0.0", port=port)
