import itertools
from datetime import date
from decimal import Decimal

import jwt
import pytest

from lottopool import create_app
from lottopool.errors import EmailDeliveryError
from lottopool.models import AdminUser, Drawing, EmailTemplate, Pool, PoolMember, Ticket, User

CRON_SECRET = "cron-test-secret"
JWT_SECRET = "jwt-test-secret"
DRAW_DATE = date(2025, 1, 4)
WINNING_NUMBERS = [12, 24, 31, 48, 59]
WINNING_BONUS = 15


class FakeEmailClient:
    """Stands in for ResendClient; records sends and fails for chosen recipients."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def send(self, *, from_email, to, subject, html, idempotency_key=None):
        if to in self.fail_for:
            raise EmailDeliveryError("Mailbox unavailable", status_code=422)
        self.sent.append(
            {"from": from_email, "to": to, "subject": subject, "html": html, "idempotency_key": idempotency_key}
        )
        return f"msg-{len(self.sent)}"


@pytest.fixture
def app(tmp_path):
    """Return an app bound to a fresh SQLite database."""
    app = create_app(
        {
            "TESTING": True,
            "DATABASE_URL": f"sqlite:///{tmp_path / 'test.db'}",
            "CRON_SECRET": CRON_SECRET,
            "JWT_SECRET_KEY": JWT_SECRET,
            "RESEND_API_KEY": "",
            "EMAIL_ENABLED": True,
            "FROM_EMAIL": "Lotto Pool <noreply@example.com>",
            "WIN_EMAIL_TEMPLATE": "win_notification",
            "SUPPORTED_GAMES": "powerball,mega_millions",
        }
    )
    app.extensions["email_client"] = None
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    factory = app.extensions["session_factory"]
    with factory() as s:
        yield s


@pytest.fixture
def fresh_session(app):
    """Open a new session so reads reflect what was committed."""

    def _open():
        return app.extensions["session_factory"]()

    return _open


_emails = itertools.count(1)


@pytest.fixture
def make_user(session):
    def _make(email=None, display_name=None, admin=False, admin_active=True):
        n = next(_emails)
        user = User(email=email if email is not None else f"member{n}@example.com", display_name=display_name)
        session.add(user)
        session.flush()
        if admin:
            session.add(AdminUser(user_id=user.id, role="admin", is_active=admin_active))
        session.commit()
        return user

    return _make


@pytest.fixture
def make_pool(session, make_user):
    def _make(name="Office Pool", game_type="powerball", members=3, total_winnings=Decimal("0")):
        pool = Pool(name=name, game_type=game_type, total_winnings=total_winnings)
        session.add(pool)
        session.flush()
        users = []
        for i in range(members):
            user = make_user(display_name=f"{name} member {i + 1}")
            session.add(PoolMember(pool_id=pool.id, user_id=user.id, role="captain" if i == 0 else "member"))
            users.append(user)
        session.commit()
        pool.users = users
        return pool

    return _make


@pytest.fixture
def make_drawing(session):
    def _make(
        game_type="powerball",
        draw_date=DRAW_DATE,
        numbers=WINNING_NUMBERS,
        bonus=WINNING_BONUS,
        jackpot_amount=Decimal("450000000"),
    ):
        drawing = Drawing(
            game_type=game_type,
            draw_date=draw_date,
            winning_numbers=list(numbers),
            bonus_number=bonus,
            jackpot_amount=jackpot_amount,
        )
        session.add(drawing)
        session.commit()
        return drawing

    return _make


@pytest.fixture
def make_ticket(session):
    def _make(pool, numbers, bonus, game_type=None, draw_date=DRAW_DATE, entered_by=None):
        ticket = Ticket(
            pool_id=pool.id,
            game_type=game_type or pool.game_type,
            numbers=list(numbers),
            bonus_number=bonus,
            draw_date=draw_date,
            entered_by=entered_by,
        )
        session.add(ticket)
        session.commit()
        return ticket

    return _make


@pytest.fixture
def win_template(session):
    template = EmailTemplate(
        name="win_notification",
        version=1,
        subject="{{pool_name}} won {{total_amount}}",
        html_body="<p>Hi {{member_name}}, share {{per_member_share}} for {{tier_summary}} on {{draw_date}}</p>",
        variables=["pool_name", "total_amount", "member_name", "per_member_share", "tier_summary", "draw_date"],
        is_active=True,
    )
    session.add(template)
    session.commit()
    return template


@pytest.fixture
def cron_headers():
    return {"X-Cron-Secret": CRON_SECRET}


def bearer_for(user_id, secret=JWT_SECRET):
    token = jwt.encode({"user_id": user_id}, secret, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def bearer():
    return bearer_for
