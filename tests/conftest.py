import pytest
from datetime import datetime, timezone
import uuid

from botocore.exceptions import ClientError

from bizhub import create_app
from bizhub.database import get_session, create_schema, drop_schema
from bizhub.models import AppUser, BusinessProfile
from bizhub.services.storage_service import StorageService


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing (fresh SQLite schema)."""
    app = create_app('config.TestingConfig')
    with app.app_context():
        drop_schema()
        create_schema()
    yield app
    with app.app_context():
        get_session().remove()
        drop_schema()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Create database session for testing."""
    session = get_session()
    yield session
    session.rollback()
    session.close()


def _detach(session, obj):
    """Load all columns and detach, so later commits in requests do not expire the fixture."""
    session.refresh(obj)
    session.expunge(obj)
    return obj


def _make_user(session, prefix):
    suffix = str(uuid.uuid4())[:8]
    user = AppUser(
        email=f'{prefix}-{suffix}@test.com',
        first_name='Test',
        last_name=prefix.title(),
        active=True
    )
    user.set_password('password123')
    session.add(user)
    session.commit()
    return _detach(session, user)


def _make_business(session, owner, business_type):
    business = BusinessProfile(
        owner_id=owner.id,
        business_name=f'Business {owner.last_name} {str(uuid.uuid4())[:6]}',
        business_type=business_type,
        address='12 Long Street\nCape Town',
        email=f'hello-{owner.id}@example.co.za',
        phone='021 555 0101'
    )
    session.add(business)
    session.commit()
    return _detach(session, business)


@pytest.fixture(scope='function')
def user1(session):
    """Create test user (owner of business1)."""
    return _make_user(session, 'user1')


@pytest.fixture(scope='function')
def user2(session):
    """Create second test user for isolation tests."""
    return _make_user(session, 'user2')


@pytest.fixture(scope='function')
def business1(session, user1):
    """Retail business owned by user1."""
    return _make_business(session, user1, 'retail')


@pytest.fixture(scope='function')
def business2(session, user2):
    """Construction business owned by user2."""
    return _make_business(session, user2, 'construction')


@pytest.fixture(scope='function')
def authenticated_client(client, user1, business1):
    """Client signed in as user1 (with business1)."""
    with client.session_transaction() as sess:
        sess['user_id'] = user1.id
    return client


@pytest.fixture(scope='function')
def onboarding_client(client, user2):
    """Client signed in as user2 before any business exists."""
    with client.session_transaction() as sess:
        sess['user_id'] = user2.id
    return client


class FakeS3Client:
    """In-memory stand-in for the boto3 S3 client."""

    def __init__(self, fail_listing=False):
        self.objects = {}
        self.fail_listing = fail_listing

    def head_bucket(self, Bucket):
        return {}

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None):
        self.objects[(bucket, key)] = {
            'Body': fileobj.read(),
            'ContentType': (ExtraArgs or {}).get('ContentType'),
            'LastModified': datetime.now(timezone.utc),
        }

    def get_paginator(self, operation_name):
        return FakePaginator(self)

    def generate_presigned_url(self, client_method, Params=None, ExpiresIn=3600):
        return f"https://storage.test/{Params['Bucket']}/{Params['Key']}?expires={ExpiresIn}"

    def delete_object(self, Bucket, Key):
        self.objects.pop((Bucket, Key), None)


class FakePaginator:
    def __init__(self, client):
        self.client = client

    def paginate(self, Bucket, Prefix=''):
        if self.client.fail_listing:
            raise ClientError({'Error': {'Code': 'InternalError', 'Message': 'listing failed'}},
                              'ListObjectsV2')
        contents = [
            {'Key': key, 'Size': len(obj['Body']), 'LastModified': obj['LastModified']}
            for (bucket, key), obj in sorted(self.client.objects.items())
            if bucket == Bucket and key.startswith(Prefix)
        ]
        yield {'Contents': contents} if contents else {}


@pytest.fixture(scope='function')
def fake_s3():
    return FakeS3Client()


@pytest.fixture(scope='function')
def storage(app, fake_s3):
    """StorageService backed by the in-memory S3 client."""
    with app.app_context():
        return StorageService(client=fake_s3, bucket='test-compliance')


@pytest.fixture(scope='function')
def failing_storage(app):
    """StorageService whose listing always fails."""
    with app.app_context():
        return StorageService(client=FakeS3Client(fail_listing=True), bucket='test-compliance')


@pytest.fixture(scope='function')
def patched_storage(monkeypatch, storage):
    """Make the blueprints use the in-memory storage."""
    monkeypatch.setattr('bizhub.blueprints.compliance.get_storage_service', lambda: storage)
    monkeypatch.setattr('bizhub.blueprints.dashboard.get_storage_service', lambda: storage)
    return storage
