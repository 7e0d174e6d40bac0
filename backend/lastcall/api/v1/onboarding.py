"""
Join request and pending employee endpoints.
"""
from fastapi import APIRouter, Depends, status

from lastcall.core.context import RequestContext
from lastcall.core.deps import get_current_user, get_store
from lastcall.schemas.common import MessageResponse
from lastcall.schemas.employee import Employee, JoinRequest, PendingEmployee, ReconcileResponse
from lastcall.services.notifications import NotificationDispatcher, get_notifier
from lastcall.services.onboarding import OnboardingWorkflow
from lastcall.store import DocumentStore

router = APIRouter()


def get_workflow(
    store: DocumentStore = Depends(get_store),
    notifier: NotificationDispatcher = Depends(get_notifier)
) -> OnboardingWorkflow:
    return OnboardingWorkflow(store, notifier)


@router.post("/join", response_model=PendingEmployee, status_code=status.HTTP_201_CREATED)
async def request_join(
    org_id: str,
    data: JoinRequest,
    workflow: OnboardingWorkflow = Depends(get_workflow),
    ctx: RequestContext = Depends(get_current_user)
):
    """Ask to join an organization with an invite token."""
    return await workflow.request_join(ctx, org_id, data.token)


@router.get("/pending-employees", response_model=list[PendingEmployee])
async def list_pending_employees(
    org_id: str,
    workflow: OnboardingWorkflow = Depends(get_workflow),
    ctx: RequestContext = Depends(get_current_user)
):
    """
    List join requests awaiting approval, oldest first.
    Requires admin role.
    """
    return await workflow.list_pending(ctx, org_id)


@router.post("/pending-employees/reconcile", response_model=ReconcileResponse)
async def reconcile_pending_employees(
    org_id: str,
    workflow: OnboardingWorkflow = Depends(get_workflow),
    ctx: RequestContext = Depends(get_current_user)
):
    """Clean up requests whose user already has an employee record."""
    return ReconcileResponse(reconciled=await workflow.reconcile(ctx, org_id))


@router.post("/pending-employees/{user_id}/approve", response_model=Employee)
async def approve_pending_employee(
    org_id: str,
    user_id: str,
    workflow: OnboardingWorkflow = Depends(get_workflow),
    ctx: RequestContext = Depends(get_current_user)
):
    return await workflow.approve(ctx, org_id, user_id)


@router.delete("/pending-employees/{user_id}", response_model=MessageResponse)
async def deny_pending_employee(
    org_id: str,
    user_id: str,
    workflow: OnboardingWorkflow = Depends(get_workflow),
    ctx: RequestContext = Depends(get_current_user)
):
    """Deny a join request."""
    denied = await workflow.deny(ctx, org_id, user_id)
    return MessageResponse(message="Join request denied" if denied else "No pending request")
