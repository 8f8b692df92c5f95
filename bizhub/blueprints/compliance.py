"""Compliance blueprint: required documents, uploads and download links."""
from datetime import date

from flask import Blueprint, request, current_app, g

from bizhub.database import get_session
from bizhub.exceptions import StorageError, ValidationError
from bizhub.middleware import require_login, require_business
from bizhub.services import compliance_service
from bizhub.services.storage_service import get_storage_service

compliance_bp = Blueprint('compliance', __name__, url_prefix='/compliance')


@compliance_bp.route('/', methods=['GET'])
@require_login
@require_business
def index():
    """Every required document with its status plus the completion summary."""
    try:
        storage = get_storage_service()
    except StorageError as e:
        current_app.logger.warning(f"[COMPLIANCE] Storage unavailable: {e.message}")
        storage = None
    return compliance_service.load_compliance_documents(
        get_session(), g.ctx.business, storage, today=date.today()
    )


@compliance_bp.route('/<document_key>/upload', methods=['POST'])
@require_login
@require_business
def upload(document_key):
    """Upload a file (multipart field `file`, optional `expiry_date`)."""
    file = request.files.get('file')
    if file is None or not file.filename:
        raise ValidationError('Select a file to upload')

    document = compliance_service.upload_compliance_document(
        get_session(),
        g.ctx.business,
        get_storage_service(),
        document_key,
        file.read(),
        file.mimetype,
        expiry_date=request.form.get('expiry_date'),
        config=current_app.config
    )
    return {'status': 'success', 'document': document}, 201


@compliance_bp.route('/<document_key>/url', methods=['GET'])
@require_login
@require_business
def document_url(document_key):
    """Time-limited link to the newest file of a document."""
    url = compliance_service.get_document_url(g.ctx.business, get_storage_service(), document_key)
    return {'url': url, 'expires_in': current_app.config.get('S3_SIGNED_URL_TTL', 3600)}
