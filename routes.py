"""API Routes for expenses"""
import logging
from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Request, status

from models.expense import Expense
from services.exceptions import EmptyUpdateError, ExpenseValidationError, StoreError
from services.expense_validation import ValidationErrors, ValidationMode, validate_expense
from services.expenses_service import ExpenseGateway, parse_expense_id

router = APIRouter()
logger = logging.getLogger(__name__)


# --- Dependency Function ---
def get_expense_gateway(request: Request) -> ExpenseGateway:
    """Dependency to get the expense gateway from the request state."""
    gateway = getattr(request.state, "expense_gateway", None)
    if gateway is None:
        logger.error("Expense gateway not found in application state. Check MongoDB connection.")
        raise StoreError("Database service not available.")
    return gateway


# Type hint for the dependency
ExpenseGatewayDep = Annotated[ExpenseGateway, Depends(get_expense_gateway)]
ExpenseBody = Annotated[Optional[Dict[str, Any]], Body()]


def _validated_payload(body: Optional[Dict[str, Any]], mode: ValidationMode) -> Dict[str, Any]:
    result = validate_expense(body or {}, mode)
    if isinstance(result, ValidationErrors):
        raise ExpenseValidationError(result.errors)
    return result.payload


# --- API Routes ---

@router.get("/expenses", response_model=List[Expense], summary="Get All Expenses", description="Retrieves all expense records, newest date first.")
async def get_expenses(gateway: ExpenseGatewayDep) -> List[Expense]:
    logger.info("GET /expenses endpoint called.")
    return await gateway.list_all()


@router.post("/expenses", response_model=Expense, status_code=status.HTTP_201_CREATED, summary="Create Expense")
async def create_expense(gateway: ExpenseGatewayDep, body: ExpenseBody = None) -> Expense:
    """
    Validates a full expense (title, amount, date, optional category) and stores it.
    """
    logger.info("POST /expenses endpoint called.")
    payload = _validated_payload(body, ValidationMode.FULL)
    return await gateway.create(payload)


@router.patch("/expenses/{expense_id}", response_model=Expense, summary="Update Expense", description="Changes only the supplied fields of an existing expense.")
async def update_expense(expense_id: str, gateway: ExpenseGatewayDep, body: ExpenseBody = None) -> Expense:
    logger.info(f"PATCH /expenses/{expense_id} endpoint called.")
    parse_expense_id(expense_id)
    payload = _validated_payload(body, ValidationMode.PARTIAL)
    if not payload:
        raise EmptyUpdateError()
    return await gateway.update_partial(expense_id, payload)


@router.delete("/expenses/{expense_id}", summary="Delete Expense")
async def delete_expense(expense_id: str, gateway: ExpenseGatewayDep) -> Dict[str, str]:
    """API endpoint to delete one expense."""
    logger.warning(f"DELETE /expenses/{expense_id} endpoint called.")
    await gateway.delete(expense_id)
    return {"message": "Expense deleted successfully"}
