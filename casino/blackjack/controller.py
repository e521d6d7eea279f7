"""Command interface the presentation layer holds against the engine."""

import asyncio
import inspect
import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Literal

from casino.blackjack.engine import BetAmount, BlackjackGame, Delay
from casino.blackjack.events import EventType
from casino.blackjack.snapshot import RoundSnapshot
from casino.blackjack.state import Phase
from casino.errors import CasinoError, InsufficientFundsError

logger = logging.getLogger(__name__)


class Action(Enum):
    """User intents a presentation layer can forward."""

    PLACE_BET = "place_bet"
    DEAL = "deal"
    HIT = "hit"
    STAND = "stand"
    DOUBLE = "double"
    SPLIT = "split"
    INSURANCE = "insurance"
    DECLINE_INSURANCE = "decline_insurance"
    EXIT = "exit"


class TableController:
    """
    Adapter between a presentation layer and the BlackjackGame.

    The presentation layer calls one coroutine per user intent and
    subscribes to engine events for repaints. User errors never escape:
    they are reported as INVALID_ACTION / INSUFFICIENT_FUNDS events and
    the call returns False. When the player turn ends, dealer play runs
    as a paced background step that ``exit()`` can cancel.
    """

    def __init__(
        self,
        game: BlackjackGame,
        delay: Delay | None = None,
        reveal_seconds: float = 0.6,
        step_seconds: float = 0.8,
        on_exit: Callable[[], None] | None = None,
    ) -> None:
        """
        Initialize the controller.

        Args:
            game: Engine to drive; its automatic dealer play is switched off
            delay: Awaitable sleep used to pace dealer cards
            reveal_seconds: Pause before the dealer's first draw
            step_seconds: Pause after each dealer draw
            on_exit: Called after exit(), e.g. to show the lobby again
        """
        self.game = game
        self.game.auto_play_dealer = False
        self._delay = delay or asyncio.sleep
        self._reveal_seconds = reveal_seconds
        self._step_seconds = step_seconds
        self._on_exit = on_exit
        self._dealer_task: asyncio.Task | None = None

        self._handlers: dict[Action, Callable[..., Any]] = {
            Action.PLACE_BET: self.game.place_bet,
            Action.DEAL: self.game.deal,
            Action.HIT: self.game.hit,
            Action.STAND: self.game.stand,
            Action.DOUBLE: self.game.double_down,
            Action.SPLIT: self.game.split,
            Action.INSURANCE: self.game.buy_insurance,
            Action.DECLINE_INSURANCE: self.game.decline_insurance,
        }

    @property
    def dealer_task(self) -> asyncio.Task | None:
        """The running dealer play, if any."""
        return self._dealer_task

    def get_state(self) -> RoundSnapshot:
        return self.game.get_state()

    async def dispatch(self, action: Action, *args: Any) -> bool:
        """
        Forward one intent to the engine.

        Returns:
            True if the engine accepted the action
        """
        if action is Action.EXIT:
            await self.exit()
            return True

        if self._dealer_task is not None and not self._dealer_task.done():
            self._report(EventType.INVALID_ACTION, "Dealer is playing")
            return False

        handler = self._handlers[action]
        try:
            inspect.signature(handler).bind(*args)
        except TypeError:
            self._report(
                EventType.INVALID_ACTION,
                f"Wrong arguments for {action.value}",
                action=action.value,
            )
            return False

        try:
            handler(*args)
        except InsufficientFundsError as err:
            self._report(
                EventType.INSUFFICIENT_FUNDS,
                str(err),
                required=err.required,
                available=err.available,
            )
            return False
        except CasinoError as err:
            self._report(EventType.INVALID_ACTION, str(err), action=action.value)
            return False

        if self.game.phase is Phase.DEALER_TURN:
            await self._run_dealer()
        return True

    async def place_bet(self, amount: BetAmount | Literal["all"]) -> bool:
        return await self.dispatch(Action.PLACE_BET, amount)

    async def deal(self) -> bool:
        return await self.dispatch(Action.DEAL)

    async def hit(self) -> bool:
        return await self.dispatch(Action.HIT)

    async def stand(self) -> bool:
        return await self.dispatch(Action.STAND)

    async def double(self) -> bool:
        return await self.dispatch(Action.DOUBLE)

    async def split(self) -> bool:
        return await self.dispatch(Action.SPLIT)

    async def insurance(self, amount: BetAmount | None = None) -> bool:
        return await self.dispatch(Action.INSURANCE, amount)

    async def decline_insurance(self) -> bool:
        return await self.dispatch(Action.DECLINE_INSURANCE)

    async def handle_input(self, key: str) -> bool:
        """
        Keyboard shortcuts.

        Space deals while betting and hits during the player turn; enter
        stands during the player turn. Anything else is ignored.
        """
        phase = self.game.phase
        if key == "space":
            if phase is Phase.BETTING:
                return await self.deal()
            if phase is Phase.PLAYER_TURN:
                return await self.hit()
        elif key == "enter" and phase is Phase.PLAYER_TURN:
            return await self.stand()
        return False

    async def _run_dealer(self) -> None:
        task = asyncio.create_task(
            self.game.play_dealer_async(
                delay=self._delay,
                reveal_seconds=self._reveal_seconds,
                step_seconds=self._step_seconds,
            )
        )
        self._dealer_task = task
        # wait() neither raises on cancellation nor cancels the task if we are.
        await asyncio.wait({task})
        if not task.cancelled():
            # Re-raise engine defects such as EmptyShoeError.
            task.result()

    async def exit(self) -> Decimal:
        """
        Leave the table: stop dealer play and discard the round.

        Returns:
            The amount refunded by the engine (zero when stakes are forfeited)
        """
        task = self._dealer_task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})
        self._dealer_task = None

        refund = self.game.abandon()
        logger.info("Left the blackjack table")
        if self._on_exit is not None:
            self._on_exit()
        return refund

    def close(self) -> None:
        """Synchronous teardown used by the lobby."""
        if self._dealer_task is not None and not self._dealer_task.done():
            self._dealer_task.cancel()
        self._dealer_task = None
        self.game.abandon()

    def _report(self, event_type: EventType, message: str, **data: Any) -> None:
        logger.debug("Rejected: %s", message)
        self.game.events.emit_new(event_type, message=message, **data)
