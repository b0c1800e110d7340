"""Build the next snapshot of a project from user input and AI proposals."""
from typing import Dict

from app.constants import ChangeAction, MessageAction, MessageRole, ResponseType
from app.schemas.app_state import AppState, Message, Plan
from app.schemas.edits import EditProposal, Modification
from app.utils.clock import Clock, utc_now


def _message(role: str, content: str, clock: Clock, **fields) -> Message:
    return Message(role=role, content=content, timestamp=clock(), **fields)


def append_user_message(state: AppState, content: str, clock: Clock = utc_now) -> AppState:
    """Add a user turn; a pending plan approval is implicitly answered by it."""
    messages = [
        message.model_copy(update={"action": None})
        if message.action == MessageAction.AWAITING_PLAN_APPROVAL
        else message
        for message in state.chatMessages
    ]
    messages.append(_message(MessageRole.USER, content, clock))
    return state.model_copy(update={"chatMessages": messages})


def append_error_message(state: AppState, reason: str, clock: Clock = utc_now) -> AppState:
    content = f"Sorry, I encountered an error: {reason}"
    messages = [*state.chatMessages, _message(MessageRole.MODEL, content, clock)]
    return state.model_copy(update={"chatMessages": messages, "projectPlan": None})


def rename(state: AppState, project_name: str) -> AppState:
    return state.model_copy(update={"projectName": project_name})


def apply_changes(files: Dict[str, str], modification: Modification) -> Dict[str, str]:
    """Apply create/update/delete operations in order; deleting a missing file is a no-op."""
    updated = dict(files)
    for change in modification.changes:
        if change.action == ChangeAction.DELETE:
            updated.pop(change.filePath, None)
        else:
            updated[change.filePath] = change.content or ""
    return updated


def _apply_modification(state: AppState, modification: Modification, clock: Clock) -> AppState:
    # First generation replaces the scaffold instead of merging into it
    base_files = state.files if state.hasGeneratedCode else {}
    messages = [
        *state.chatMessages,
        _message(MessageRole.MODEL, modification.reason, clock),
        _message(MessageRole.SYSTEM, "Go to Preview", clock, action=MessageAction.GOTO_PREVIEW),
    ]
    return state.model_copy(update={
        "files": apply_changes(base_files, modification),
        "previewHtml": modification.previewHtml or state.previewHtml,
        "standaloneHtml": modification.standaloneHtml or state.standaloneHtml,
        "chatMessages": messages,
        "hasGeneratedCode": True,
        "projectName": modification.projectName or state.projectName,
        "projectPlan": None,
    })


def _apply_plan(state: AppState, plan: Plan, clock: Clock) -> AppState:
    content = f"I've drafted a plan for your project, **{plan.projectName}**. Please review it below."
    message = _message(
        MessageRole.MODEL, content, clock, plan=plan, action=MessageAction.AWAITING_PLAN_APPROVAL
    )
    return state.model_copy(update={
        "projectPlan": plan,
        "chatMessages": [*state.chatMessages, message],
    })


def apply_proposal(state: AppState, proposal: EditProposal, clock: Clock = utc_now) -> AppState:
    """Merge an edit generator answer into ``state`` and return the new snapshot."""
    if proposal.responseType == ResponseType.MODIFY_CODE:
        return _apply_modification(state, proposal.modification, clock)
    if proposal.responseType == ResponseType.PROJECT_PLAN:
        return _apply_plan(state, proposal.plan, clock)
    messages = [*state.chatMessages, _message(MessageRole.MODEL, proposal.message, clock)]
    return state.model_copy(update={"chatMessages": messages})
