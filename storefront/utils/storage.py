"""Scoped persistence for cart and wishlist snapshots."""
import json
from typing import Dict, List, Optional, Sequence, Type, TypeVar
from pydantic import BaseModel, TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from storefront.database.snapshot_model import CollectionSnapshot

T = TypeVar("T", bound=BaseModel)


class CollectionStore:
    """
    Key-value store of serialized collections, addressed by scope key.
    
    Subclasses supply raw text access (``read``/``write``/``delete``); this
    class handles serialization. Loading never raises: a snapshot that fails
    to parse is dropped and an empty collection returned. Saving never
    raises either, a failed write is reported and the in-memory state stays
    authoritative.
    """
    
    def read(self, scope_key: str) -> Optional[str]:
        raise NotImplementedError
    
    def write(self, scope_key: str, payload: str):
        raise NotImplementedError
    
    def delete(self, scope_key: str):
        raise NotImplementedError
    
    def load(self, scope_key: str, item_type: Type[T]) -> List[T]:
        """
        Load the snapshot stored under ``scope_key``.
        
        Args:
            scope_key: Storage key, e.g. ``cart:anonymous``
            item_type: Pydantic model of one collection item
            
        Returns:
            List of items, empty when nothing (valid) is stored
        """
        try:
            payload = self.read(scope_key)
        except (SQLAlchemyError, OSError) as e:
            print(f"[STORE] Failed to read '{scope_key}': {e}")
            return []
        
        if payload is None:
            return []
        
        try:
            return TypeAdapter(List[item_type]).validate_json(payload)
        except ValidationError as e:
            print(f"[STORE] Discarding corrupt snapshot '{scope_key}': {e.error_count()} error(s)")
            try:
                self.delete(scope_key)
            except (SQLAlchemyError, OSError) as delete_error:
                print(f"[STORE] Failed to delete '{scope_key}': {delete_error}")
            return []
    
    def save(self, scope_key: str, items: Sequence[BaseModel]):
        """
        Overwrite the snapshot stored under ``scope_key``.
        
        Args:
            scope_key: Storage key, e.g. ``cart:anonymous``
            items: Collection items to persist
        """
        payload = json.dumps([item.model_dump(mode="json") for item in items])
        try:
            self.write(scope_key, payload)
        except (SQLAlchemyError, OSError) as e:
            print(f"[STORE] Failed to save '{scope_key}': {e}")


class MemoryCollectionStore(CollectionStore):
    """Process-local store backed by a dict of JSON strings."""
    
    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = data if data is not None else {}
    
    def read(self, scope_key: str) -> Optional[str]:
        return self.data.get(scope_key)
    
    def write(self, scope_key: str, payload: str):
        self.data[scope_key] = payload
    
    def delete(self, scope_key: str):
        self.data.pop(scope_key, None)


class DatabaseCollectionStore(CollectionStore):
    """Store backed by the ``collection_snapshots`` table."""
    
    def __init__(self, session_factory: sessionmaker):
        """
        Initialize the database store.
        
        Args:
            session_factory: SQLAlchemy session factory, e.g. SessionLocal
        """
        self.session_factory = session_factory
    
    def read(self, scope_key: str) -> Optional[str]:
        db = self.session_factory()
        try:
            snapshot = db.get(CollectionSnapshot, scope_key)
            return snapshot.payload if snapshot else None
        finally:
            db.close()
    
    def write(self, scope_key: str, payload: str):
        db = self.session_factory()
        try:
            snapshot = db.get(CollectionSnapshot, scope_key)
            if snapshot:
                snapshot.payload = payload
            else:
                db.add(CollectionSnapshot(scope_key=scope_key, payload=payload))
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        finally:
            db.close()
    
    def delete(self, scope_key: str):
        db = self.session_factory()
        try:
            db.query(CollectionSnapshot).filter(
                CollectionSnapshot.scope_key == scope_key
            ).delete()
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        finally:
            db.close()
