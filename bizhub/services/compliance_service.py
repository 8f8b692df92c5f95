"""
Compliance documents: required-document catalog, expiry classification and
completion summary.

File presence is read from the object storage listing under
`{business_id}/`. The `compliance_document` table only keeps the expiry date
supplied at upload time plus the last computed status as a display cache.
"""
import calendar
import enum
import logging
import time
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from bizhub.exceptions import NotFoundError, StorageError, ValidationError
from bizhub.models import ComplianceDocument
from bizhub.services.storage_service import object_key

logger = logging.getLogger(__name__)

EXPIRY_WARNING_MONTHS = 3


class DocumentStatus(str, enum.Enum):
    """Compliance status of one document slot."""
    MISSING = 'missing'
    VALID = 'valid'
    EXPIRING = 'expiring'
    EXPIRED = 'expired'


STATUS_PROGRESS = {
    DocumentStatus.VALID: 100,
    DocumentStatus.EXPIRING: 75,
    DocumentStatus.EXPIRED: 25,
    DocumentStatus.MISSING: 0,
}


def _document(key, name, description, category, required=True):
    return {
        'key': key,
        'name': name,
        'description': description,
        'category': category,
        'required': required,
    }


# Every business type needs these
BASE_DOCUMENTS = (
    _document('business-registration', 'Business Registration',
              'Company registration document', 'registration'),
    _document('tax-clearance', 'Tax Clearance Certificate',
              'SARS tax compliance status', 'tax'),
)

_HEALTH_CERTIFICATE = _document('health-certificate', 'Health Certificate',
                                'Health department certificate', 'legal')

BUSINESS_TYPE_EXTRAS = {
    'restaurant': (
        _HEALTH_CERTIFICATE,
        _document('food-license', 'Food Service License',
                  'Local municipality food service license', 'legal'),
        _document('liquor-license', 'Liquor License',
                  'If you serve alcohol', 'legal', required=False),
    ),
    'retail': (
        _document('zoning-permit', 'Zoning Permit', 'Municipal zoning approval', 'legal'),
        _document('trademark', 'Trademark Registration', 'If applicable', 'legal', required=False),
    ),
    'salon': (
        _HEALTH_CERTIFICATE,
    ),
    'property': (
        _document('estate-license', 'Estate Agency License',
                  'Property Practitioners Regulatory Authority certificate', 'legal'),
        _document('fidelity-fund', 'Fidelity Fund Certificate',
                  'PPRA fidelity fund certificate', 'legal'),
    ),
    'construction': (
        _document('cidb', 'CIDB Registration',
                  'Construction Industry Development Board registration', 'legal'),
        _document('liability-insurance', 'Liability Insurance',
                  'Professional indemnity insurance', 'insurance'),
        _document('safety-certificate', 'Safety Compliance Certificate',
                  'Occupational health and safety compliance', 'legal'),
    ),
}


def get_required_documents(business_type: Optional[str]) -> List[Dict]:
    """
    Document templates required for a business type.

    Unknown or empty types get only the base documents.
    """
    extras = BUSINESS_TYPE_EXTRAS.get(business_type or 'default', ())
    return [dict(doc) for doc in BASE_DOCUMENTS + tuple(extras)]


def find_document_template(business_type: Optional[str], document_key: str) -> Optional[Dict]:
    for doc in get_required_documents(business_type):
        if doc['key'] == document_key:
            return doc
    return None


def add_months(day: date, months: int) -> date:
    """Calendar-month arithmetic; the day is clamped to the target month's length."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def classify_document(file_reference: Optional[str], expiry_date: Optional[date],
                      today: date = None) -> DocumentStatus:
    """
    Derive the status of a document slot.

    Args:
        file_reference: Storage key of the uploaded file, None when nothing is stored
        expiry_date: Expiry date of the document, None when it does not expire
        today: Date to use as reference (defaults to date.today())

    Returns:
        DocumentStatus
    """
    if not file_reference:
        return DocumentStatus.MISSING
    if expiry_date is None:
        return DocumentStatus.VALID

    if today is None:
        today = date.today()

    if expiry_date <= today:
        return DocumentStatus.EXPIRED
    if expiry_date < add_months(today, EXPIRY_WARNING_MONTHS):
        return DocumentStatus.EXPIRING
    return DocumentStatus.VALID


def status_progress(status) -> int:
    """Progress bar value shown for a status (0-100)."""
    return STATUS_PROGRESS[DocumentStatus(status)]


def mark_uploaded(document: Dict) -> Dict:
    """A freshly uploaded document counts as valid until the next evaluation pass."""
    document['status'] = DocumentStatus.VALID.value
    document['progress'] = status_progress(DocumentStatus.VALID)
    return document


def summarize_compliance(documents: List[Dict]) -> Dict:
    """
    Completion summary over a list of classified documents.

    Returns:
        dict with overall_percent, total, per-status counts and by_category
        (category -> {status: count, 'total': n})
    """
    counts = {status: 0 for status in DocumentStatus}
    by_category = {}

    for doc in documents:
        status = DocumentStatus(doc['status'])
        counts[status] += 1
        category = by_category.setdefault(
            doc.get('category') or 'other',
            {**{s.value: 0 for s in DocumentStatus}, 'total': 0}
        )
        category[status.value] += 1
        category['total'] += 1

    total = len(documents)
    overall_percent = 0
    if total:
        ratio = Decimal(100 * counts[DocumentStatus.VALID]) / Decimal(total)
        overall_percent = int(ratio.quantize(Decimal('1'), rounding=ROUND_HALF_UP))

    return {
        'overall_percent': overall_percent,
        'total': total,
        'valid_count': counts[DocumentStatus.VALID],
        'expiring_count': counts[DocumentStatus.EXPIRING],
        'expired_count': counts[DocumentStatus.EXPIRED],
        'missing_count': counts[DocumentStatus.MISSING],
        'by_category': by_category,
    }


def _latest_files_by_key(objects: List[Dict], business_id) -> Dict[str, Dict]:
    """Map document key -> newest stored object for that key."""
    prefix = f"{business_id}/"
    latest = {}
    for obj in objects:
        file_name = obj['key'][len(prefix):] if obj['key'].startswith(prefix) else obj['key']
        stem = file_name.rsplit('.', 1)[0]
        document_key, sep, stamp = stem.rpartition('-')
        if not sep or not stamp.isdigit():
            continue
        current = latest.get(document_key)
        if current is None or int(stamp) > current['stamp']:
            latest[document_key] = {'file_reference': obj['key'], 'stamp': int(stamp)}
    return latest


def _serialize(template: Dict, row: Optional[ComplianceDocument], file_reference: Optional[str],
               status: DocumentStatus) -> Dict:
    return {
        'key': template['key'],
        'name': template['name'],
        'description': template['description'],
        'category': template['category'],
        'required': template['required'],
        'file_reference': file_reference,
        'expiry_date': row.expiry_date.isoformat() if row is not None and row.expiry_date else None,
        'uploaded_at': row.uploaded_at.isoformat() if row is not None and row.uploaded_at else None,
        'status': status.value,
        'progress': status_progress(status),
    }


def load_compliance_documents(session, business, storage, today: date = None) -> Dict:
    """
    Classify every required document of a business.

    The storage listing decides whether a file exists. Stored rows supply
    expiry dates; their cached status is rewritten with the fresh result.
    If the listing fails (or no storage is available), every document is
    reported as missing and `degraded` is True.

    Returns:
        dict with documents (catalog order), summary and degraded flag
    """
    templates = get_required_documents(business.business_type)
    rows = {
        row.document_key: row
        for row in session.query(ComplianceDocument).filter(
            ComplianceDocument.business_id == business.id
        ).all()
    }

    files = {}
    degraded = storage is None
    if not degraded:
        try:
            files = _latest_files_by_key(storage.list_objects(f"{business.id}/"), business.id)
        except StorageError as e:
            logger.warning(f"[COMPLIANCE] Listing for business {business.id} failed, showing catalog: {e.message}")
            degraded = True

    documents = []
    for template in templates:
        row = rows.get(template['key'])
        file_reference = None if degraded else files.get(template['key'], {}).get('file_reference')
        status = classify_document(file_reference, row.expiry_date if row is not None else None, today)
        if row is not None and row.status != status.value and not degraded:
            row.status = status.value
        documents.append(_serialize(template, row, file_reference, status))

    if session.dirty:
        session.commit()

    return {
        'documents': documents,
        'summary': summarize_compliance(documents),
        'degraded': degraded,
    }


def parse_expiry_date(value) -> Optional[date]:
    """Parse an ISO `YYYY-MM-DD` expiry date; empty means no expiry."""
    if value in (None, ''):
        return None
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError as e:
        raise ValidationError('Expiry date must use the YYYY-MM-DD format') from e


def upload_compliance_document(session, business, storage, document_key: str, data: bytes,
                               content_type: str, expiry_date=None, config=None) -> Dict:
    """
    Store a file for a document slot and record its metadata.

    Args:
        session: SQLAlchemy session
        business: BusinessProfile the document belongs to
        storage: StorageService
        document_key: Catalog key (e.g. 'tax-clearance')
        data: File content
        content_type: MIME type sent by the client
        expiry_date: Optional expiry date (date or 'YYYY-MM-DD')
        config: Mapping with MAX_UPLOAD_SIZE and ALLOWED_DOCUMENT_TYPES

    Returns:
        Serialized document, status valid with progress 100

    Raises:
        NotFoundError: If the key is not in the business's catalog
        ValidationError: If the file is empty, too large or of an unsupported type
        StorageError: If the upload fails
    """
    config = config or {}
    template = find_document_template(business.business_type, document_key)
    if template is None:
        raise NotFoundError(f"Unknown compliance document '{document_key}'")

    if not data:
        raise ValidationError('Select a file to upload')

    max_size = config.get('MAX_UPLOAD_SIZE', 10 * 1024 * 1024)
    if len(data) > max_size:
        raise ValidationError(f"File is too large (maximum {max_size // (1024 * 1024)}MB)")

    allowed_types = config.get('ALLOWED_DOCUMENT_TYPES') or {
        'application/pdf': 'pdf', 'image/png': 'png', 'image/jpeg': 'jpg'
    }
    extension = allowed_types.get((content_type or '').lower())
    if extension is None:
        raise ValidationError('Only PDF, PNG or JPEG files can be uploaded')

    expiry = parse_expiry_date(expiry_date)

    file_name = f"{document_key}-{int(time.time() * 1000)}.{extension}"
    key = storage.upload_bytes(
        data,
        object_key(business.id, file_name),
        content_type,
        metadata={'document_key': document_key}
    )

    row = session.query(ComplianceDocument).filter(
        ComplianceDocument.business_id == business.id,
        ComplianceDocument.document_key == document_key
    ).first()
    if row is None:
        row = ComplianceDocument(business_id=business.id, document_key=document_key)
        session.add(row)

    row.name = template['name']
    row.description = template['description']
    row.category = template['category']
    row.required = template['required']
    row.expiry_date = expiry
    row.status = DocumentStatus.VALID.value
    row.uploaded_at = datetime.now(timezone.utc)

    try:
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"[COMPLIANCE] Business {business.id} uploaded '{document_key}' as {key}")
    return mark_uploaded(_serialize(template, row, key, DocumentStatus.VALID))


def get_document_url(business, storage, document_key: str) -> str:
    """Signed URL for the newest file stored for a document slot."""
    if find_document_template(business.business_type, document_key) is None:
        raise NotFoundError(f"Unknown compliance document '{document_key}'")

    files = _latest_files_by_key(storage.list_objects(f"{business.id}/"), business.id)
    entry = files.get(document_key)
    if entry is None:
        raise NotFoundError('No file has been uploaded for this document yet')
    return storage.generate_signed_url(entry['file_reference'])
