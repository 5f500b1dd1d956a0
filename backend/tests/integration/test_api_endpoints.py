"""
API endpoint tests.

Routes run with dependency overrides: a fixed user id, an EntitlementGuard
over the in-memory store, and mocked repositories and services. No database
or network access.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from music_studio.api.dependencies import (
    get_current_user_id,
    get_entitlement_guard,
    get_payment_service,
    get_subscription_service,
)
from music_studio.config.settings import Settings
from music_studio.domain.lyrics import GeneratedLyrics, parse_karaoke_lines
from music_studio.domain.music import GeneratedMusic, MusicGenerationRequest
from music_studio.domain.plans import PlanId
from music_studio.domain.subscription import SubscriptionStatus
from music_studio.infrastructure.ai.gemini_service import get_gemini_service
from music_studio.infrastructure.db.dependencies import (
    get_ai_generation_repository,
    get_practice_session_repository,
    get_song_repository,
    get_user_repository,
)
from music_studio.infrastructure.db.models.ai_generation import AIGenerationKind
from music_studio.infrastructure.db.models.payment import Payment
from music_studio.infrastructure.db.models.practice_session import PracticeSession
from music_studio.infrastructure.db.models.song import Song, SongSortField
from music_studio.infrastructure.db.models.user import UserAccount
from music_studio.infrastructure.exceptions import InvalidSignatureError, ValidationError
from music_studio.services.entitlement_guard import EntitlementGuard
from music_studio.services.payment_service import CheckoutResult, VerificationResult

from conftest import fixed_clock, make_subscription


SONG_BODY = {
    "title": "First Light",
    "audio_url": "https://cdn.example.com/first-light.mp3",
    "duration": 185,
    "genre": "pop",
}


@pytest.fixture
def api(app, store):
    """App wired to the in-memory store as user-1."""
    store.add_user("user-1")
    app.dependency_overrides[get_current_user_id] = lambda: "user-1"
    app.dependency_overrides[get_entitlement_guard] = lambda: EntitlementGuard(
        store, clock=fixed_clock
    )
    users = AsyncMock()
    users.get_by_id.side_effect = lambda user_id: (
        UserAccount(id=user_id, email=f"{user_id}@example.com")
        if user_id in store.users else None
    )
    app.dependency_overrides[get_user_repository] = lambda: users
    return app


@pytest.fixture
def song_repo(api):
    repo = AsyncMock()
    repo.create.side_effect = lambda data: Song.model_validate(data)
    api.dependency_overrides[get_song_repository] = lambda: repo
    return repo


def _premium(store):
    store.subscriptions["user-1"] = [
        make_subscription(
            plan=PlanId.MONTHLY,
            created_at=datetime(2026, 2, 1, tzinfo=timezone.utc),
            end_date=datetime(2026, 3, 1, tzinfo=timezone.utc),
        )
    ]


class TestHealth:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"


class TestAuthRequired:

    def test_entitlements_without_token(self, client):
        settings = Settings(_env_file=None, jwt_secret="x" * 32)
        with patch("music_studio.api.dependencies.get_settings", return_value=settings):
            resp = client.get("/api/entitlements")
        assert resp.status_code == 401


class TestSongs:

    def test_create_within_quota(self, client, store, song_repo):
        store.songs["user-1"] = 4

        resp = client.post("/api/songs", json=SONG_BODY)

        assert resp.status_code == 201
        body = resp.json()
        assert body["author_id"] == "user-1"
        assert body["is_public"] is True
        song_repo.create.assert_awaited_once()

    def test_create_over_quota_is_forbidden(self, client, store, song_repo):
        store.songs["user-1"] = 5

        resp = client.post("/api/songs", json=SONG_BODY)

        assert resp.status_code == 403
        assert resp.json()["detail"] == "Monthly song limit reached (5 songs)"
        song_repo.create.assert_not_awaited()

    def test_premium_is_unlimited(self, client, store, song_repo):
        _premium(store)
        store.songs["user-1"] = 250

        assert client.post("/api/songs", json=SONG_BODY).status_code == 201

    def test_strict_mode_locks_user_row(self, client, store, song_repo):
        strict = Settings(_env_file=None, strict_quota_enforcement=True)
        with patch("music_studio.api.routes.songs.get_settings", return_value=strict):
            client.post("/api/songs", json=SONG_BODY)
        assert store.lock_calls == [True]

    def test_unregistered_user_is_denied_before_insert(self, client, store, song_repo):
        store.users.clear()

        resp = client.post("/api/songs", json=SONG_BODY)

        assert resp.status_code == 403
        assert resp.json()["detail"] == "User not found"
        song_repo.create.assert_not_awaited()

    def test_list_public_songs(self, client, song_repo):
        song_repo.list_public.return_value = [
            Song(author_id="user-2", **SONG_BODY),
        ]
        song_repo.count_public.return_value = 11

        resp = client.get("/api/songs", params={"page": 2, "limit": 5, "genre": "pop"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["pages"] == 3
        assert len(body["songs"]) == 1
        song_repo.list_public.assert_awaited_once_with(
            skip=5, limit=5, genre="pop", mood=None, license_type=None, search=None,
            sort_by=SongSortField.CREATED_AT, descending=True,
        )

    def test_list_sorted_by_price_ascending(self, client, song_repo):
        song_repo.list_public.return_value = []
        song_repo.count_public.return_value = 0

        resp = client.get("/api/songs", params={"sort_by": "price", "sort_order": "asc"})

        assert resp.status_code == 200
        kwargs = song_repo.list_public.call_args.kwargs
        assert (kwargs["sort_by"], kwargs["descending"]) == (SongSortField.PRICE, False)

    def test_list_rejects_unknown_sort_column(self, client, song_repo):
        resp = client.get("/api/songs", params={"sort_by": "author_id"})

        assert resp.status_code == 422
        song_repo.list_public.assert_not_awaited()


class TestPractice:

    @pytest.fixture
    def practice_repo(self, api):
        repo = AsyncMock()
        repo.create.side_effect = lambda data: PracticeSession.model_validate(data)
        api.dependency_overrides[get_practice_session_repository] = lambda: repo
        return repo

    def test_record_session(self, client, practice_repo):
        resp = client.post("/api/practice", json={"duration": 300, "overall_score": 82.5})
        assert resp.status_code == 201
        assert resp.json()["user_id"] == "user-1"

    def test_daily_limit_reached(self, client, store, practice_repo):
        store.practice_seconds["user-1"] = 15 * 60

        resp = client.post("/api/practice", json={"duration": 60})

        assert resp.status_code == 403
        assert resp.json()["detail"] == "Daily practice limit reached (15 minutes)"


class TestLyrics:

    @pytest.fixture
    def generations(self, api):
        repo = AsyncMock()
        api.dependency_overrides[get_ai_generation_repository] = lambda: repo
        return repo

    @pytest.fixture
    def gemini(self, api):
        service = MagicMock()
        lines = parse_karaoke_lines("Hold on\nHold on tight")
        service.generate_lyrics = AsyncMock(
            return_value=GeneratedLyrics(
                title="Rain Song",
                theme="Rain",
                language="English",
                style="Folk",
                lyrics="Hold on\nHold on tight",
                karaoke_lines=lines,
                word_count=5,
                line_count=2,
                model="gemini-test",
                created_at=datetime(2026, 2, 15, tzinfo=timezone.utc),
            )
        )
        api.dependency_overrides[get_gemini_service] = lambda: service
        return service

    BODY = {
        "theme": "Rain",
        "language": "English",
        "style": "Folk",
        "idea": "Waiting out a storm together",
    }

    def test_generation_is_recorded(self, client, gemini, generations):
        resp = client.post("/api/lyrics", json=self.BODY)

        assert resp.status_code == 200
        assert resp.json()["line_count"] == 2
        generations.record.assert_awaited_once()
        assert generations.record.call_args.args[0] == "user-1"

    def test_quota_exhausted_skips_model(self, client, store, gemini, generations):
        store.ai_generations["user-1"] = 3

        resp = client.post("/api/lyrics", json=self.BODY)

        assert resp.status_code == 403
        gemini.generate_lyrics.assert_not_awaited()
        generations.record.assert_not_awaited()

    def test_karaoke(self, client, api):
        resp = client.post("/api/lyrics/karaoke", json={"lyrics": "Chorus:\nla la\n\nla la la"})

        assert resp.status_code == 200
        assert resp.json()["total_lines"] == 2
        assert resp.json()["estimated_duration"] == 8


class TestMusicGeneration:

    BODY = {
        "genre": "Lo-fi",
        "mood": "Calm",
        "tempo": 80,
        "key": "C",
        "duration": 60,
        "instrument": "piano",
    }

    @pytest.fixture
    def generations(self, api):
        repo = AsyncMock()
        api.dependency_overrides[get_ai_generation_repository] = lambda: repo
        return repo

    @pytest.fixture
    def gemini(self, api):
        request = MusicGenerationRequest(**self.BODY)
        service = MagicMock()
        service.generate_music = AsyncMock(
            return_value=GeneratedMusic(
                title=request.title,
                genre="Lo-fi",
                mood="Calm",
                tempo=80,
                key="C",
                duration=60,
                instrument="piano",
                arrangement="Intro (4 bars): C - Am - F - G",
                model="gemini-test",
                created_at=datetime(2026, 2, 15, tzinfo=timezone.utc),
                parameters=request,
            )
        )
        api.dependency_overrides[get_gemini_service] = lambda: service
        return service

    def test_generation_is_recorded_as_music(self, client, gemini, generations):
        resp = client.post("/api/music-generation", json=self.BODY)

        assert resp.status_code == 200
        assert resp.json()["title"] == "Calm Lo-fi in C"
        generations.record.assert_awaited_once()
        assert generations.record.call_args.args[:2] == ("user-1", AIGenerationKind.MUSIC)

    def test_shares_quota_with_lyrics(self, client, store, gemini, generations):
        store.ai_generations["user-1"] = 3

        resp = client.post("/api/music-generation", json=self.BODY)

        assert resp.status_code == 403
        gemini.generate_music.assert_not_awaited()
        generations.record.assert_not_awaited()

    def test_tempo_out_of_range(self, client, gemini, generations):
        resp = client.post("/api/music-generation", json={**self.BODY, "tempo": 250})

        assert resp.status_code == 422
        gemini.generate_music.assert_not_awaited()


class TestEntitlements:

    def test_summary_omits_unlimited_remaining(self, client, store, api):
        _premium(store)

        body = client.get("/api/entitlements").json()

        assert body["plan"] == "monthly"
        assert body["is_premium"] is True
        assert body["songs"] == {"allowed": True}
        assert body["practice"] == {"allowed": True}

    def test_free_song_quota(self, client, store, api):
        store.songs["user-1"] = 2

        body = client.get("/api/entitlements/songs").json()

        assert body == {"allowed": True, "remaining": 3}

    def test_unknown_user(self, client, store, api):
        store.users.clear()

        body = client.get("/api/entitlements/practice").json()

        assert body == {"allowed": False, "reason": "User not found"}


class TestSubscriptions:

    def test_plans(self, client):
        body = client.get("/api/plans").json()
        assert [p["id"] for p in body["plans"]] == ["free", "monthly", "yearly"]

    def test_current_defaults_to_free(self, client, api):
        body = client.get("/api/subscription").json()
        assert body["plan"]["id"] == "free"
        assert body["is_premium"] is False
        assert body["subscription"] is None

    def test_select_free_plan(self, client, api):
        subscriptions = AsyncMock()
        subscriptions.select_plan.return_value = make_subscription(id="sub-1")
        api.dependency_overrides[get_subscription_service] = lambda: subscriptions
        api.dependency_overrides[get_payment_service] = lambda: AsyncMock()

        resp = client.post("/api/subscription", json={"plan": "free"})

        assert resp.status_code == 201
        assert resp.json()["checkout"] is None
        subscriptions.select_plan.assert_awaited_once_with("user-1", PlanId.FREE)

    def test_select_paid_plan_starts_checkout(self, client, api):
        pending = make_subscription(
            id="sub-2", plan=PlanId.YEARLY, status=SubscriptionStatus.PENDING
        )
        payments = AsyncMock()
        payments.checkout.return_value = CheckoutResult(
            order={"id": "order_9", "amount": 499900, "currency": "INR"},
            payment=Payment(id="pay-row-9", user_id="user-1", amount=4999),
            subscription=pending,
            key_id="rzp_test_key",
        )
        api.dependency_overrides[get_subscription_service] = lambda: AsyncMock()
        api.dependency_overrides[get_payment_service] = lambda: payments

        resp = client.post("/api/subscription", json={"plan": "yearly"})

        assert resp.status_code == 201
        checkout = resp.json()["checkout"]
        assert checkout == {
            "order_id": "order_9",
            "payment_id": "pay-row-9",
            "amount": 499900,
            "currency": "INR",
            "key_id": "rzp_test_key",
        }

    def test_unknown_plan_rejected(self, client, api):
        api.dependency_overrides[get_subscription_service] = lambda: AsyncMock()
        api.dependency_overrides[get_payment_service] = lambda: AsyncMock()

        resp = client.post("/api/subscription", json={"plan": "platinum"})
        assert resp.status_code == 422

    def test_select_plan_for_unregistered_user_is_404(self, client, store, api):
        subscriptions = AsyncMock()
        payments = AsyncMock()
        api.dependency_overrides[get_subscription_service] = lambda: subscriptions
        api.dependency_overrides[get_payment_service] = lambda: payments
        store.users.clear()

        for plan in ("free", "monthly"):
            resp = client.post("/api/subscription", json={"plan": plan})
            assert resp.status_code == 404
            assert resp.json()["message"] == "User not found"

        subscriptions.select_plan.assert_not_awaited()
        payments.checkout.assert_not_awaited()


class TestPayments:

    VERIFY = {
        "razorpay_order_id": "order_1",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": "sig",
    }

    def test_verify_activates(self, client, api):
        payments = AsyncMock()
        payments.verify.return_value = VerificationResult(
            payment=Payment(
                id="pay-row-1", user_id="user-1", amount=499,
                status="completed", razorpay_order_id="order_1",
            ),
            subscription=make_subscription(id="sub-1", plan=PlanId.MONTHLY),
        )
        api.dependency_overrides[get_payment_service] = lambda: payments

        resp = client.post("/api/payments/verify", json=self.VERIFY)

        assert resp.status_code == 200
        assert resp.json()["subscription"]["status"] == "active"
        payments.verify.assert_awaited_once_with("user-1", "order_1", "pay_1", "sig")

    def test_bad_signature_is_400(self, client, api):
        payments = AsyncMock()
        payments.verify.side_effect = InvalidSignatureError("Invalid payment signature")
        api.dependency_overrides[get_payment_service] = lambda: payments

        resp = client.post("/api/payments/verify", json=self.VERIFY)

        assert resp.status_code == 400
        assert resp.json()["error"] == "InvalidSignatureError"

    def test_checkout_free_plan_is_400(self, client, api):
        payments = AsyncMock()
        payments.checkout.side_effect = ValidationError("Only paid plans can be purchased")
        api.dependency_overrides[get_payment_service] = lambda: payments

        resp = client.post("/api/payments/checkout", json={"plan": "free"})

        assert resp.status_code == 400
        assert resp.json()["message"] == "Only paid plans can be purchased"

    def test_checkout_for_unregistered_user_is_404(self, client, store, api):
        payments = AsyncMock()
        api.dependency_overrides[get_payment_service] = lambda: payments
        store.users.clear()

        resp = client.post("/api/payments/checkout", json={"plan": "monthly"})

        assert resp.status_code == 404
        payments.checkout.assert_not_awaited()

    def test_lookup_by_order_id(self, client, api):
        payments = AsyncMock()
        payments.get_payment_by_order.return_value = Payment(
            id="pay-row-1", user_id="user-1", amount=499,
            razorpay_order_id="order_1",
        )
        api.dependency_overrides[get_payment_service] = lambda: payments

        resp = client.get("/api/payments", params={"order_id": "order_1"})

        assert resp.status_code == 200
        assert resp.json()["razorpay_order_id"] == "order_1"
        payments.get_payment_by_order.assert_awaited_once_with("user-1", "order_1")
