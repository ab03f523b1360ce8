import uuid


def new_id(prefix: str) -> str:
    """Identifiant lisible : usr_1a2b3c4d5e6f"""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def strip_mongo_id(doc: dict) -> dict:
    """insert_one() ajoute `_id` au dict inséré ; on ne l'expose jamais."""
    return {k: v for k, v in doc.items() if k != "_id"}


def update_outcome(result) -> dict:
    return {"matchedCount": result.matched_count, "modifiedCount": result.modified_count}


def no_match() -> dict:
    return {"matchedCount": 0, "modifiedCount": 0}
