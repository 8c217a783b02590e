"""
Hostel Management - Test Configuration and Fixtures
"""
import os
import tempfile
from datetime import date
from typing import AsyncGenerator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['REGISTRATION_SWEEP_ENABLED'] = 'false'
os.environ['INVOICES_PATH'] = tempfile.mkdtemp(prefix='hostel-invoices-')

from app.main import app
from app.core.database import Base, get_db
from app.core.security import get_password_hash
from app.models.account import Account, AccountPool
from app.models.hostel import Hostel, HostelGender
from app.modules.auth.roles import Role
from app.services.auth_service import auth_service

fake = Faker()

DEFAULT_PASSWORD = 'Password123!'


@pytest.fixture(scope='function')
async def db_session(tmp_path) -> AsyncGenerator[AsyncSession, None]:
    """Fresh SQLite database for each test"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )
    async with session_factory() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_account(db_session: AsyncSession):
    """Factory: persist an account in a pool with a role"""
    async def _make(
        role: Role = Role.STUDENT,
        pool: AccountPool = AccountPool.STAFF,
        password: str = DEFAULT_PASSWORD,
        **fields
    ) -> Account:
        account = Account(
            pool=pool,
            role=role,
            first_name=fields.pop('first_name', fake.first_name()),
            last_name=fields.pop('last_name', fake.last_name()),
            email=fields.pop('email', fake.unique.email()),
            hashed_password=await get_password_hash(password),
            is_active=fields.pop('is_active', True),
            is_verified=True,
            **fields
        )
        db_session.add(account)
        await db_session.commit()
        await db_session.refresh(account)
        return account
    return _make


@pytest.fixture
def make_hostel(db_session: AsyncSession):
    """Factory: persist a hostel"""
    async def _make(gender: HostelGender = HostelGender.BOYS, **fields) -> Hostel:
        hostel = Hostel(
            name=fields.pop('name', f"{fake.last_name()} Hostel"),
            code=fields.pop('code', fake.unique.bothify('H-###').upper()),
            gender=gender,
            capacity=fields.pop('capacity', 100),
            current_occupancy=fields.pop('current_occupancy', 10),
            **fields
        )
        db_session.add(hostel)
        await db_session.commit()
        await db_session.refresh(hostel)
        return hostel
    return _make


def bearer(account: Account) -> dict:
    """Authorization header carrying a session token for `account`"""
    return {'Authorization': f'Bearer {auth_service.issue_token(account)}'}


@pytest.fixture
def headers_for():
    return bearer


@pytest.fixture
async def warden(make_account) -> Account:
    return await make_account(Role.WARDEN, employee_id='EMP00001')


@pytest.fixture
def warden_headers(warden: Account) -> dict:
    return bearer(warden)


@pytest.fixture
async def student(make_account) -> Account:
    """Promoted student in the boys pool"""
    return await make_account(
        Role.STUDENT,
        pool=AccountPool.BOYS_STUDENT,
        register_number='BH25000001',
        gender='male',
        date_of_birth=date(2005, 6, 1),
    )


@pytest.fixture
def student_headers(student: Account) -> dict:
    return bearer(student)


@pytest.fixture
def contact_info():
    def _contact() -> dict:
        return {
            'name': fake.name(),
            'occupation': fake.job()[:50],
            'address': fake.street_address(),
            'pin': fake.numerify('6#####'),
            'contact': fake.numerify('9#########'),
        }
    return _contact


@pytest.fixture
def registration_data(contact_info):
    """Factory: a valid POST /api/registration/submit body"""
    def _data(**overrides) -> dict:
        data = {
            'name': fake.name(),
            'email': fake.unique.email(),
            'password': 'secret123',
            'dateOfBirth': '2005-04-12',
            'course': 'B.E. Computer Science',
            'year': 1,
            'gender': 'male',
            'category': 'BC',
            'messPreference': 'VEG',
            'parentInfo': contact_info(),
            'guardianInfo': contact_info(),
        }
        data.update(overrides)
        return data
    return _data
