"""Store gateway for expense documents kept in MongoDB."""
import logging
from typing import Any, Dict, List

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection  # Type hint for collection
from pydantic import ValidationError
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from models.expense import Expense
from services.exceptions import EmptyUpdateError, InvalidIdError, NotFoundError, StoreError

logger = logging.getLogger(__name__)


def parse_expense_id(raw_id: str) -> ObjectId:
    """Turns a path id into an ObjectId, rejecting malformed ids before any query."""
    if not isinstance(raw_id, str) or not ObjectId.is_valid(raw_id):
        logger.info(f"Rejected malformed expense id: {raw_id!r}")
        raise InvalidIdError()
    return ObjectId(raw_id)


class ExpenseGateway:
    """
    Translates expense CRUD intents into operations on one MongoDB collection.

    The collection is injected so the same gateway runs against a real Motor
    collection in production and an in-memory one in tests.
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def list_all(self) -> List[Expense]:
        """Fetches every expense, newest date first."""
        logger.info(f"Fetching all expenses from collection '{self.collection.name}'...")
        expenses = []
        try:
            cursor = self.collection.find({}, sort=[("date", DESCENDING)])
            async for doc in cursor:
                try:
                    expenses.append(Expense.model_validate(doc))
                except ValidationError as e:
                    logger.error(f"Data validation error for document ID {doc.get('_id', 'N/A')}: {e}")
                    # Skip invalid documents
                    continue
        except PyMongoError as e:
            logger.error(f"Database error fetching expenses: {e}")
            raise StoreError(f"Database error fetching expenses: {e}") from e
        logger.info(f"Fetched {len(expenses)} expenses successfully.")
        return expenses

    async def create(self, payload: Dict[str, Any]) -> Expense:
        """Inserts a validated payload and returns the stored document with its new id."""
        document = dict(payload)
        document.pop("_id", None)
        document.pop("id", None)
        try:
            result = await self.collection.insert_one(document)
            created = await self.collection.find_one({"_id": result.inserted_id})
        except PyMongoError as e:
            logger.error(f"Database error creating expense: {e}")
            raise StoreError(f"Database error creating expense: {e}") from e
        if created is None:
            logger.error(f"Inserted expense {result.inserted_id} could not be read back.")
            raise StoreError(f"Inserted expense {result.inserted_id} could not be read back.")
        logger.info(f"Created expense {result.inserted_id}.")
        return Expense.model_validate(created)

    async def update_partial(self, expense_id: str, payload: Dict[str, Any]) -> Expense:
        """
        Sets only the supplied fields on an existing expense.

        Fields missing from `payload` keep their stored values. A match whose
        values are already equal still returns the document; only a missing id
        raises NotFoundError.
        """
        if not payload:
            raise EmptyUpdateError()
        object_id = parse_expense_id(expense_id)
        try:
            updated = await self.collection.find_one_and_update(
                {"_id": object_id},
                {"$set": dict(payload)},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Database error updating expense {expense_id}: {e}")
            raise StoreError(f"Database error updating expense {expense_id}: {e}") from e
        if updated is None:
            logger.info(f"Update skipped, expense {expense_id} not found.")
            raise NotFoundError()
        logger.info(f"Updated expense {expense_id} fields: {sorted(payload)}")
        return Expense.model_validate(updated)

    async def delete(self, expense_id: str) -> None:
        """Hard-deletes one expense."""
        object_id = parse_expense_id(expense_id)
        logger.warning(f"Deleting expense {expense_id} from collection '{self.collection.name}'.")
        try:
            result = await self.collection.delete_one({"_id": object_id})
        except PyMongoError as e:
            logger.error(f"Database error deleting expense {expense_id}: {e}")
            raise StoreError(f"Database error deleting expense {expense_id}: {e}") from e
        if result.deleted_count == 0:
            raise NotFoundError()
        logger.info(f"Deleted expense {expense_id}.")
