# app/shared/deps.py
"""
Dépendances FastAPI réutilisables dans tous les routers.
Injectées via Depends() — jamais appelées directement.
"""
from typing import Annotated
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import decode_token
from app.shared.models import User
from app.shared.enums import ADMIN_ROLES

bearer = HTTPBearer()


async def _get_user_from_token(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Token invalide ou expiré",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(credentials.credentials)
        user_id = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == str(user_id)))
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        raise credentials_exception
    return user


# ── Deps publiques ─────────────────────────────────────────

async def get_current_user(
    user: Annotated[User, Depends(_get_user_from_token)],
) -> User:
    """Utilisateur authentifié (tout rôle)."""
    return user


async def get_current_admin(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Exige un rôle d'administration (ADMIN, SUPER_ADMIN, COMPANY_ADMIN)."""
    if user.role not in ADMIN_ROLES:
        raise HTTPException(status_code=403, detail="Accès administrateur requis")
    return user


# ── Type aliases pour les routers ─────────────────────────
DbDep    = Annotated[AsyncSession, Depends(get_db)]
AdminDep = Annotated[User, Depends(get_current_admin)]
