"""Website service: landing page templates and editor content."""
import re
from typing import Dict, List

from bizhub.exceptions import ValidationError
from bizhub.models import WebsiteData


def _template(template_id, name, description, category):
    return {'id': template_id, 'name': name, 'description': description, 'category': category}


WEBSITE_TEMPLATES = (
    _template('modern-business', 'Modern Business',
              'A clean, professional template for small businesses', 'business'),
    _template('elegant-services', 'Elegant Services',
              'Perfect for service-based businesses and consultants', 'services'),
    _template('retail-showcase', 'Retail Showcase',
              'Highlight your products with this visual template', 'retail'),
    _template('contractor-pro', 'Contractor Pro',
              'Designed for construction and contracting businesses', 'construction'),
    _template('professional-portfolio', 'Professional Portfolio',
              'Showcase your professional services and expertise', 'professional'),
    _template('education-hub', 'Education Hub',
              'Perfect for educational services and training providers', 'education'),
    _template('restaurant-delight', 'Restaurant Delight',
              'Showcase your menu and dining experience', 'restaurant'),
)

# Business type -> recommended template category
TEMPLATE_CATEGORY_BY_BUSINESS_TYPE = {
    'retail': 'retail',
    'tender': 'business',
    'construction': 'construction',
    'professional': 'professional',
    'education': 'education',
    'restaurant': 'restaurant',
    'salon': 'services',
    'property': 'business',
}

DEFAULT_WEBSITE = {
    'template_id': None,
    'description': '',
    'services': [],
    'testimonials': [],
    'primary_color': '#0f766e',
    'secondary_color': '#0284c7',
    'font_family': 'Inter',
    'hero_image_url': None,
    'contact_email': None,
    'contact_phone': None,
    'address': None,
}

HEX_COLOR = re.compile(r'^#[0-9a-fA-F]{6}$')


def get_template(template_id: str) -> Dict:
    for template in WEBSITE_TEMPLATES:
        if template['id'] == template_id:
            return dict(template)
    raise ValidationError(f"Unknown website template '{template_id}'.")


def recommended_templates(business_type: str) -> List[Dict]:
    category = TEMPLATE_CATEGORY_BY_BUSINESS_TYPE.get(business_type, 'business')
    return [dict(t) for t in WEBSITE_TEMPLATES if t['category'] == category]


def get_website_data(session, business) -> Dict:
    """Saved website content, or defaults built from the business profile."""
    row = session.query(WebsiteData).filter(WebsiteData.business_id == business.id).first()
    if row:
        data = row.to_dict()
        data['saved'] = True
        return data

    data = dict(DEFAULT_WEBSITE, services=[], testimonials=[])
    data.update({
        'id': None,
        'business_id': business.id,
        'title': business.business_name or 'My Business Website',
        'contact_email': business.email,
        'contact_phone': business.phone,
        'address': business.address,
        'saved': False,
    })
    return data


def _validate(data: Dict) -> None:
    if 'title' in data and not (data.get('title') or '').strip():
        raise ValidationError('Website title is required.')
    for field in ('primary_color', 'secondary_color'):
        value = data.get(field)
        if value and not HEX_COLOR.match(value):
            raise ValidationError(f'{field} must be a hex colour like #0f766e.')
    if data.get('template_id'):
        get_template(data['template_id'])
    for field in ('services', 'testimonials'):
        if data.get(field) is not None and not isinstance(data[field], list):
            raise ValidationError(f'{field} must be a list.')


def save_website_data(session, business, data: Dict) -> WebsiteData:
    """Create or overwrite the website content of a business (last write wins)."""
    _validate(data)

    row = session.query(WebsiteData).filter(WebsiteData.business_id == business.id).first()
    if row is None:
        defaults = get_website_data(session, business)
        row = WebsiteData(business_id=business.id)
        for field in WebsiteData.EDITABLE_FIELDS:
            setattr(row, field, defaults.get(field))
        session.add(row)

    for field in WebsiteData.EDITABLE_FIELDS:
        if field in data:
            value = data[field]
            setattr(row, field, value.strip() if isinstance(value, str) else value)

    session.commit()
    return row
