"""
MongoDB Service - registration form documents.

Collections:
1. raw_registration_forms    - text extracted from the uploaded form
2. parsed_registration_forms - AI-extracted job-posting fields

Both are keyed by the company's relational id. Nothing here is read back
into the company record; the companies table holds the accepted values.
"""

from datetime import datetime
from typing import Optional

from bson import ObjectId
from pymongo.collection import Collection

from placecell.db.mongodb import COLLECTIONS, get_collection


def serialize_doc(doc: dict) -> dict:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


class RawRegistrationFormService:
    """Original form text, one document per upload."""

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["raw_forms"])

    def insert(self, company_id: int, form_text: str, filename: str = None, uploaded_by: str = None) -> str:
        """Returns the MongoDB ObjectId as a string."""
        doc = {
            "company_id": company_id,
            "form_text": form_text,
            "filename": filename,
            "uploaded_by": uploaded_by,
            "created_at": datetime.utcnow(),
            "is_parsed": False
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def mark_as_parsed(self, mongo_id: str) -> bool:
        result = self.collection.update_one(
            {"_id": ObjectId(mongo_id)},
            {"$set": {"is_parsed": True, "parsed_at": datetime.utcnow()}}
        )
        return result.modified_count > 0

class ParsedRegistrationFormService:
    """Validated extraction results, linked to the raw document they came from."""

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["parsed_forms"])

    def insert(self, company_id: int, raw_form_id: str, fields: dict) -> str:
        doc = {
            "company_id": company_id,
            "raw_form_id": raw_form_id,
            "fields": fields,
            "created_at": datetime.utcnow()
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def get_latest(self, company_id: int) -> Optional[dict]:
        doc = self.collection.find_one({"company_id": company_id}, sort=[("created_at", -1)])
        return serialize_doc(doc)


class RegistrationFormStore:
    """Raw and parsed collections behind one object, for injection into routes."""

    def __init__(self):
        self.raw = RawRegistrationFormService()
        self.parsed = ParsedRegistrationFormService()

    def save_raw(self, company_id: int, form_text: str, filename: str = None, uploaded_by: str = None) -> str:
        return self.raw.insert(company_id, form_text, filename=filename, uploaded_by=uploaded_by)

    def save_parsed(self, company_id: int, raw_form_id: str, fields: dict) -> str:
        parsed_id = self.parsed.insert(company_id, raw_form_id, fields)
        self.raw.mark_as_parsed(raw_form_id)
        return parsed_id

    def latest_parsed(self, company_id: int) -> Optional[dict]:
        return self.parsed.get_latest(company_id)


def get_registration_store() -> RegistrationFormStore:
    return RegistrationFormStore()
