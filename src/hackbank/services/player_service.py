"""Player Directory Service for hackbank.

This module provides registration, lookups, moderation actions and rank-ups
for players, plus the cached directory listings. Every write reports its
:class:`~hackbank.domain.enums.DirectoryEvent` to the shared cache after the
transaction commits.
"""

import logging
from collections.abc import Callable

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hackbank.cache import PlayerDirectoryCache
from hackbank.database import lock_players, run_in_transaction
from hackbank.domain.enums import CacheView, DirectoryEvent, PlayerRole, TransactionType
from hackbank.domain.errors import InsufficientCreditsError, NotFoundError, UsernameTakenError
from hackbank.domain.rules_config import DEFAULT_RULES, EconomyRules
from hackbank.interfaces import ILedgerService
from hackbank.models import Player
from hackbank.schemas import HackTarget, PlayerSummary
from hackbank.services.ledger_service import RANK_UP

logger = logging.getLogger(__name__)


class PlayerService:
    """Service for the player directory."""

    def __init__(
        self,
        session: Session,
        ledger: ILedgerService,
        *,
        rules: EconomyRules = DEFAULT_RULES,
        cache: PlayerDirectoryCache | None = None,
    ):
        self.session = session
        self.ledger = ledger
        self.rules = rules
        self.cache = cache if cache is not None else PlayerDirectoryCache()

    def get_by_id(self, player_id: int) -> Player:
        """Return the player with the given id.

        Raises:
            NotFoundError: If no such player exists
        """
        player = self.session.get(Player, player_id)
        if player is None:
            raise NotFoundError(f"User with id [{player_id}] does not exist.")
        return player

    def get_by_username(self, username: str) -> Player | None:
        return self.session.scalars(select(Player).where(Player.username == username)).first()

    def is_admin(self, player: Player) -> bool:
        return player.role == PlayerRole.ADMIN

    def list_active(self) -> list[PlayerSummary]:
        """Active players in registration order."""
        return list(self.cache.get_or_load(CacheView.ACTIVE, None, self._load_active))

    def list_active_ranked(self) -> list[PlayerSummary]:
        """Active players, highest rank first."""
        return list(self.cache.get_or_load(CacheView.ACTIVE_RANKED, None, self._load_ranked))

    def list_active_except(self, username: str) -> list[HackTarget]:
        """Active players other than ``username``, offered as hack targets."""
        return list(
            self.cache.get_or_load(
                CacheView.ACTIVE_EXCEPT, username, lambda: self._load_targets(username)
            )
        )

    def list_all_except(self, username: str) -> list[PlayerSummary]:
        """Every player other than ``username``, including banned ones."""
        return list(
            self.cache.get_or_load(
                CacheView.ALL_EXCEPT, username, lambda: self._load_all_except(username)
            )
        )

    def clear_cache(self) -> None:
        self.cache.clear()

    def _load_active(self) -> tuple[PlayerSummary, ...]:
        stmt = select(Player).where(Player.is_active.is_(True)).order_by(Player.id)
        return tuple(PlayerSummary.model_validate(p) for p in self._fresh(stmt))

    def _load_ranked(self) -> tuple[PlayerSummary, ...]:
        stmt = (
            select(Player)
            .where(Player.is_active.is_(True))
            .order_by(Player.rank.desc(), Player.id)
        )
        return tuple(PlayerSummary.model_validate(p) for p in self._fresh(stmt))

    def _load_targets(self, username: str) -> tuple[HackTarget, ...]:
        stmt = (
            select(Player)
            .where(Player.is_active.is_(True), Player.username != username)
            .order_by(Player.id)
        )
        return tuple(HackTarget.model_validate(p) for p in self._fresh(stmt))

    def _load_all_except(self, username: str) -> tuple[PlayerSummary, ...]:
        stmt = select(Player).where(Player.username != username).order_by(Player.id)
        return tuple(PlayerSummary.model_validate(p) for p in self._fresh(stmt))

    def _fresh(self, stmt) -> list[Player]:
        return list(self.session.scalars(stmt.execution_options(populate_existing=True)))

    def register(self, username: str, email: str | None, password_hash: str) -> Player:
        """Create a new active player with the starting balance.

        Raises:
            UsernameTakenError: If the username is already in use
        """

        def operation() -> Player:
            if self.get_by_username(username) is not None:
                raise UsernameTakenError(username)
            player = Player(
                username=username,
                email=email,
                password_hash=password_hash,
                role=PlayerRole.USER.value,
                is_active=True,
                credits=self.rules.starting_credits,
                rank=0,
            )
            self.session.add(player)
            self.session.flush()
            return player

        try:
            player = run_in_transaction(self.session, operation)
        except IntegrityError as exc:
            raise UsernameTakenError(username) from exc

        self.cache.invalidate_for(DirectoryEvent.REGISTERED)
        logger.info(
            "Successfully created new user account for username [%s] and id [%s]",
            player.username,
            player.id,
        )
        return player

    def initialize_root_player(
        self, username: str, email: str | None, password_hash: str
    ) -> Player | None:
        """Seed an administrator when the directory is empty.

        Returns:
            The new administrator, or None if players already exist
        """
        if self.session.scalar(select(func.count()).select_from(Player)):
            return None

        def operation() -> Player:
            root = Player(
                username=username,
                email=email,
                password_hash=password_hash,
                role=PlayerRole.ADMIN.value,
                is_active=True,
                credits=self.rules.starting_credits,
                rank=self.rules.root_rank,
            )
            self.session.add(root)
            self.session.flush()
            return root

        root = run_in_transaction(self.session, operation)
        self.cache.invalidate_for(DirectoryEvent.REGISTERED)
        logger.info("Seeded root administrator [%s]", root.username)
        return root

    def switch_status(self, player_id: int) -> Player:
        """Flip a player between active and inactive."""
        return self._update(player_id, _set_active(None), DirectoryEvent.STATUS_CHANGED)

    def switch_role(self, player_id: int) -> Player:
        """Flip a player between USER and ADMIN."""

        def flip(player: Player) -> None:
            player.role = (
                PlayerRole.USER.value if player.role == PlayerRole.ADMIN else PlayerRole.ADMIN.value
            )

        return self._update(player_id, flip, DirectoryEvent.ROLE_CHANGED)

    def ban(self, player: Player) -> Player:
        return self._update(player.id, _set_active(False), DirectoryEvent.STATUS_CHANGED)

    def unban(self, player: Player) -> Player:
        return self._update(player.id, _set_active(True), DirectoryEvent.STATUS_CHANGED)

    def promote(self, player: Player) -> Player:
        return self._update(player.id, _set_role(PlayerRole.ADMIN), DirectoryEvent.ROLE_CHANGED)

    def demote(self, player: Player) -> Player:
        return self._update(player.id, _set_role(PlayerRole.USER), DirectoryEvent.ROLE_CHANGED)

    def rank_up(self, player: Player) -> Player:
        """Spend credits to gain one rank.

        Raises:
            InsufficientCreditsError: If the player cannot afford the cost
        """
        cost = self.rules.rank_up_cost

        def buy_rank(locked: Player) -> None:
            if locked.credits < cost:
                raise InsufficientCreditsError(cost, locked.credits)
            locked.credits -= cost
            self.ledger.record(locked, cost, RANK_UP, TransactionType.SEND)
            locked.rank += 1

        updated = self._update(
            player.id, buy_rank, DirectoryEvent.RANK_CHANGED, DirectoryEvent.BALANCE_CHANGED
        )
        logger.info("Player [%s] ranked up to %s", updated.id, updated.rank)
        return updated

    def edit_profile(
        self,
        player_id: int,
        *,
        username: str | None = None,
        email: str | None = None,
        password_hash: str | None = None,
        profile_picture: str | None = None,
    ) -> Player:
        """Update profile fields.

        An empty username or password keeps the old value. For email and
        profile picture ``None`` keeps the old value and an empty string
        clears it.

        Raises:
            NotFoundError: If the player does not exist
            UsernameTakenError: If the new username belongs to someone else
        """

        def edit(player: Player) -> None:
            if username and username != player.username:
                owner = self.get_by_username(username)
                if owner is not None and owner.id != player.id:
                    raise UsernameTakenError(username)
                player.username = username
            if email is not None:
                player.email = email or None
            if password_hash:
                player.password_hash = password_hash
            if profile_picture is not None:
                player.profile_picture = profile_picture or None

        try:
            return self._update(player_id, edit, DirectoryEvent.PROFILE_EDITED)
        except IntegrityError as exc:
            raise UsernameTakenError(username or "") from exc

    def _update(
        self,
        player_id: int,
        mutate: Callable[[Player], None],
        *events: DirectoryEvent,
    ) -> Player:
        def operation() -> Player:
            player = lock_players(self.session, [player_id])[player_id]
            mutate(player)
            self.session.flush()
            return player

        player = run_in_transaction(self.session, operation)
        self.cache.invalidate_for(*events)
        return player


def _set_active(value: bool | None) -> Callable[[Player], None]:
    """Return a mutation setting ``is_active``; ``None`` toggles it."""

    def mutate(player: Player) -> None:
        player.is_active = (not player.is_active) if value is None else value

    return mutate


def _set_role(role: PlayerRole) -> Callable[[Player], None]:
    def mutate(player: Player) -> None:
        player.role = role.value

    return mutate
