"""
MongoDB Service - CRUD operations for document collections.

Collections in this database:
1. raw_resumes          - Text extracted from the uploaded resume
2. parsed_resumes       - AI-extracted structured resume data
3. personality_reports  - Full AI personality analysis payloads

A user has at most one current resume: a new upload replaces the old
raw + parsed pair.
"""

from datetime import datetime
from typing import Optional
from bson import ObjectId
from pymongo.collection import Collection

from jobboard.db.mongodb import get_collection, COLLECTIONS


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def serialize_doc(doc: dict) -> dict:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


# ============================================================
# RAW RESUMES COLLECTION
# ============================================================

class RawResumeService:
    """Original resume text, one current document per user."""

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["raw_resumes"])

    def replace(self, user_id: int, resume_text: str, filename: str = None, file_type: str = None) -> str:
        """Drop previous uploads for the user and store this one. Returns the new ObjectId."""
        self.collection.delete_many({"user_id": user_id})
        doc = {
            "user_id": user_id,
            "resume_text": resume_text,
            "filename": filename,
            "file_type": file_type,
            "uploaded_at": datetime.utcnow(),
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def get_by_user(self, user_id: int) -> Optional[dict]:
        doc = self.collection.find_one({"user_id": user_id}, sort=[("uploaded_at", -1)])
        return serialize_doc(doc)


# ============================================================
# PARSED RESUMES COLLECTION
# ============================================================

class ParsedResumeService:
    """AI parsing results, one current document per user."""

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["parsed_resumes"])

    def replace(
        self,
        user_id: int,
        raw_resume_id: str,
        parsed_data: dict,
        confidence: float = None,
        filename: str = None,
    ) -> str:
        self.collection.delete_many({"user_id": user_id})
        doc = {
            "user_id": user_id,
            "raw_resume_id": ObjectId(raw_resume_id) if raw_resume_id else None,
            "original_filename": filename,
            "extracted_data": parsed_data,
            "parsing_success": True,
            "ai_confidence_score": confidence,
            "parsed_at": datetime.utcnow(),
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def get_by_user(self, user_id: int) -> Optional[dict]:
        doc = self.collection.find_one({"user_id": user_id})
        if doc and doc.get("raw_resume_id"):
            doc["raw_resume_id"] = str(doc["raw_resume_id"])
        return serialize_doc(doc)


# ============================================================
# PERSONALITY REPORTS COLLECTION
# ============================================================

class PersonalityReportService:
    """Full analysis JSON; PostgreSQL keeps the queryable fields."""

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["personality_reports"])

    def upsert(self, user_id: int, report: dict, responses: list) -> None:
        self.collection.update_one(
            {"user_id": user_id},
            {"$set": {
                "report": report,
                "responses": responses,
                "updated_at": datetime.utcnow(),
            }},
            upsert=True
        )

    def get_by_user(self, user_id: int) -> Optional[dict]:
        return serialize_doc(self.collection.find_one({"user_id": user_id}))
