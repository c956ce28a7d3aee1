"""
Admin-facing approval operations: the workflow transitions behind the admin
gateway (permission ``approve_registrations``, per-actor rate limit, one audit
entry per call).
"""
from accounts.enums import AdminPermission
from system_admin.gateway import admin_action

from . import workflow


def _approval_target(arguments, approval):
    """File gateway entries under the provider, like the workflow entries."""
    target_entity, category = workflow.provider_entity(approval.provider)
    return {"target_entity": target_entity, "target_id": approval.provider_id, "category": category}


def _gated(action):
    return admin_action(
        AdminPermission.APPROVE_REGISTRATIONS,
        action=action,
        target=_approval_target,
    )


@_gated("approval_reviewer_assignment")
def assign_reviewer(actor, approval_id, reviewer=None):
    return workflow.assign_reviewer(approval_id, reviewer or actor, actor=actor)


@_gated("approval_documents_request")
def request_additional_documents(actor, approval_id, required_docs):
    return workflow.request_additional_documents(approval_id, required_docs, actor)


@_gated("approval_document_verification")
def verify_document(actor, approval_id, document_type, verified, notes=""):
    return workflow.verify_document(approval_id, document_type, verified, actor, notes)


@_gated("approval_decision")
def decide(actor, approval_id, approved, comments=""):
    return workflow.decide(approval_id, approved, actor, comments)


@_gated("approval_note")
def add_internal_note(actor, approval_id, note):
    return workflow.add_internal_note(approval_id, note, actor)


@_gated("approval_communication")
def log_communication(actor, approval_id, channel, message, subject="", response=""):
    return workflow.log_communication(approval_id, channel, message, actor, subject=subject, response=response)


@_gated("approval_document_submission")
def submit_document(actor, approval_id, document_type, file_name="", file_url=""):
    return workflow.submit_document(approval_id, document_type, file_name, file_url, actor=actor)
