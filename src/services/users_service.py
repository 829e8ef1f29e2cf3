"""
Users service - data access for the users table
"""

import logging
from typing import Optional
from services.base_service import BaseService, ServiceResult

logger = logging.getLogger(__name__)

# users.id is a SERIAL (int4) column
PG_INT4_MIN = -2**31
PG_INT4_MAX = 2**31 - 1


def parse_user_id(raw_id) -> Optional[int]:
    """
    Convert a path id to an integer key

    Returns None for anything that cannot address a row (non-numeric or
    outside the int4 range), so callers can answer not-found without a query.
    """
    try:
        user_id = int(str(raw_id).strip())
    except (TypeError, ValueError):
        return None
    if user_id < PG_INT4_MIN or user_id > PG_INT4_MAX:
        return None
    return user_id


class UsersService(BaseService):
    """Service for user CRUD operations"""

    def __init__(self):
        super().__init__("users", ["name", "email"])

    async def list_users(self) -> ServiceResult:
        """
        Get every user

        No ORDER BY: rows come back in whatever order the store returns them.
        """
        return await self.fetch_all(f"SELECT {self.select_list} FROM {self.table_name}")

    async def get_user(self, user_id) -> ServiceResult:
        """
        Get a user by ID

        Args:
            user_id: Raw id from the request path

        Returns:
            ServiceResult with one row, or RESOURCE_NOT_FOUND
        """
        key = parse_user_id(user_id)
        if key is None:
            return self.not_found(user_id)

        result = await self.fetch_one(
            "READ",
            f"SELECT {self.select_list} FROM {self.table_name} WHERE {self.pk_field} = $1",
            key
        )
        if result.success and not result.data:
            return self.not_found(user_id)
        return result

    async def create_user(self, name: str, email: str) -> ServiceResult:
        """
        Create a new user; the store assigns the id

        Args:
            name: Display name of the user
            email: Email address of the user

        Returns:
            ServiceResult with the created row
        """
        logger.info(f"Creating new user: {email}")
        result = await self.fetch_one(
            "INSERT",
            f"INSERT INTO {self.table_name} (name, email) VALUES ($1, $2) RETURNING {self.select_list}",
            name,
            email
        )
        if result.success and not result.data:
            return ServiceResult(
                success=False,
                error="Insert operation failed - no data returned",
                error_type="DATABASE_ERROR"
            )
        return result

    async def update_user(self, user_id, name: str, email: str) -> ServiceResult:
        """
        Update name and email of a user and return the post-update row

        The write and the read-back are one statement, so a concurrent delete
        either happens before (not found) or after (updated row returned).
        """
        key = parse_user_id(user_id)
        if key is None:
            return self.not_found(user_id)

        logger.info(f"Updating user {key}")
        result = await self.fetch_one(
            "UPDATE",
            f"UPDATE {self.table_name} SET name = $1, email = $2 "
            f"WHERE {self.pk_field} = $3 RETURNING {self.select_list}",
            name,
            email,
            key
        )
        if result.success and not result.data:
            return self.not_found(user_id)
        return result

    async def delete_user(self, user_id) -> ServiceResult:
        """
        Delete a user by ID

        Returns:
            ServiceResult with count=1, or RESOURCE_NOT_FOUND when no row matched
        """
        key = parse_user_id(user_id)
        if key is None:
            return self.not_found(user_id)

        logger.info(f"Deleting user {key}")
        result = await self.execute(
            "DELETE",
            f"DELETE FROM {self.table_name} WHERE {self.pk_field} = $1",
            key
        )
        if result.success and result.count == 0:
            return self.not_found(user_id)
        return result


# Global service instance
_users_service: Optional[UsersService] = None

def get_users_service() -> UsersService:
    """Get the global users service instance"""
    global _users_service
    if _users_service is None:
        _users_service = UsersService()
    return _users_service
