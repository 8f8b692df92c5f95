"""Sales service: recorded sales with JSON line items."""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import or_

from bizhub.exceptions import NotFoundError, ValidationError
from bizhub.models import Customer, Sale, SaleStatus
from bizhub.services.pricing import calculate_subtotal, normalize_line_items, round_money

SALE_STATUSES = [status.value for status in SaleStatus]


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_sale_date(value) -> Optional[datetime]:
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ValidationError('Sale date must be an ISO date (YYYY-MM-DD).') from e


def serialize_sale(sale: Sale) -> Dict[str, Any]:
    return {
        'id': sale.id,
        'customer_id': sale.customer_id,
        'customer_name': sale.customer_name,
        'description': sale.description,
        'items': normalize_line_items(sale.items),
        'amount': f"{round_money(sale.amount):.2f}",
        'status': sale.status,
        'date': sale.date.isoformat() if sale.date else None,
    }


def _apply_sale_data(session, business_id: int, sale: Sale, data: Dict[str, Any]) -> None:
    customer = None
    if data.get('customer_id') not in (None, ''):
        try:
            customer_id = int(data['customer_id'])
        except (TypeError, ValueError) as e:
            raise ValidationError('Invalid customer.') from e
        customer = session.query(Customer).filter(
            Customer.id == customer_id,
            Customer.business_id == business_id
        ).first()
        if not customer:
            raise NotFoundError(f"Customer {data['customer_id']} not found.")

    customer_name = _clean(data.get('customer_name')) or (customer.name if customer else None)
    if not customer_name:
        raise ValidationError('Customer name is required.')

    items = normalize_line_items(data.get('items'))
    if any(not item['name'] for item in items):
        raise ValidationError('All items must have a name.')

    status = data.get('status') or sale.status or SaleStatus.PENDING.value
    if status not in SALE_STATUSES:
        raise ValidationError(f"Invalid sale status '{status}'.")

    sale.customer_id = customer.id if customer else None
    sale.customer_name = customer_name
    sale.description = _clean(data.get('description'))
    sale.items = items
    # Sales carry no VAT: the amount is the plain sum of line totals
    sale.amount = calculate_subtotal(items) if items else Decimal('0')
    sale.status = status
    sale_date = _parse_sale_date(data.get('date'))
    if sale_date is not None:
        sale.date = sale_date
    elif sale.date is None:
        sale.date = datetime.now(timezone.utc)


def list_sales(session, business_id: int, search: Optional[str] = None,
               status: Optional[str] = None) -> List[Sale]:
    """Sales of a business, most recent first."""
    query = session.query(Sale).filter(Sale.business_id == business_id)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Sale.customer_name.ilike(pattern), Sale.description.ilike(pattern)))
    if status and status != 'all':
        query = query.filter(Sale.status == status)
    return query.order_by(Sale.date.desc(), Sale.id.desc()).all()


def get_sale(session, business_id: int, sale_id: int) -> Sale:
    sale = session.query(Sale).filter(Sale.id == sale_id, Sale.business_id == business_id).first()
    if not sale:
        raise NotFoundError(f'Sale {sale_id} not found.')
    return sale


def create_sale(session, business_id: int, data: Dict[str, Any]) -> Sale:
    try:
        sale = Sale(business_id=business_id)
        _apply_sale_data(session, business_id, sale, data)
        session.add(sale)
        session.commit()
        return sale
    except Exception:
        session.rollback()
        raise


def update_sale(session, business_id: int, sale_id: int, data: Dict[str, Any]) -> Sale:
    """Rewrite a sale wholesale; fields not sent keep their stored value."""
    try:
        sale = get_sale(session, business_id, sale_id)
        merged = serialize_sale(sale)
        merged.pop('date')
        merged.update(data)
        _apply_sale_data(session, business_id, sale, merged)
        session.commit()
        return sale
    except Exception:
        session.rollback()
        raise


def delete_sale(session, business_id: int, sale_id: int) -> None:
    sale = get_sale(session, business_id, sale_id)
    session.delete(sale)
    session.commit()


def summarize_sales(sales: List[Sale]) -> Dict[str, Any]:
    """Totals shown above the sales list."""
    total = sum((Decimal(sale.amount or 0) for sale in sales if sale.status != SaleStatus.CANCELLED.value),
                Decimal('0'))
    return {
        'total_amount': f"{round_money(total):.2f}",
        'completed_count': sum(1 for sale in sales if sale.status == SaleStatus.COMPLETED.value),
        'pending_count': sum(1 for sale in sales if sale.status == SaleStatus.PENDING.value),
        'count': len(sales),
    }
