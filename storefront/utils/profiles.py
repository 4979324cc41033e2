"""Registered accounts and their profiles."""
from typing import Optional
from sqlalchemy.orm import Session, sessionmaker
from storefront.database.profile_model import Profile
from storefront.database.profile_schema import ProfileUpdate
from storefront.utils.identity import AccountDirectory


class ProfileAccountDirectory(AccountDirectory):
    """
    Accounts backed by the ``profiles`` table.
    
    Shared by every browser session, so an account registered from one
    client is known to all of them.
    """
    
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory
    
    def is_registered(self, user_id: str) -> bool:
        db = self.session_factory()
        try:
            return db.get(Profile, user_id) is not None
        finally:
            db.close()
    
    def register(self, user_id: str):
        db = self.session_factory()
        try:
            if db.get(Profile, user_id) is None:
                db.add(Profile(id=user_id))
                db.commit()
                print(f"[IDENTITY] Registered profile {user_id}")
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


def get_profile(db: Session, user_id: str) -> Optional[Profile]:
    """Get the profile of ``user_id``, if registered."""
    return db.get(Profile, user_id)


def update_profile(db: Session, user_id: str, update: ProfileUpdate) -> Profile:
    """
    Update the editable profile fields.
    
    Args:
        db: Database session
        user_id: Account whose profile to update
        update: Fields to change; unset fields are left alone
        
    Returns:
        The updated profile (created if the account had none yet)
    """
    profile = db.get(Profile, user_id)
    if profile is None:
        profile = Profile(id=user_id)
        db.add(profile)
    
    for field, value in update.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)
    
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(profile)
    return profile
