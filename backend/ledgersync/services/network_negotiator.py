"""
Network negotiation.

Runs once per gateway initialize():

    UNCHECKED --chain id matches--> MATCHED
    UNCHECKED --mismatch--> MISMATCHED --switch ok--> MATCHED
    MISMATCHED --switch fails with 4902--> register descriptor --ok--> MATCHED
                                                                --fail--> FAILED
    MISMATCHED --switch fails with anything else--> FAILED

Only the "unrecognized chain" code triggers the register fallback; every
other switch failure is final.
"""
import enum
import logging
from typing import Optional

from ledgersync.errors import NetworkMismatch, RpcError
from ledgersync.schemas.ledger import NetworkDescriptor
from ledgersync.services.signing import UNRECOGNIZED_CHAIN, SigningProvider

logger = logging.getLogger(__name__)


class NegotiationState(str, enum.Enum):
    UNCHECKED = "unchecked"
    MISMATCHED = "mismatched"
    MATCHED = "matched"
    FAILED = "failed"


class NetworkNegotiator:
    def __init__(self, provider: SigningProvider, target: NetworkDescriptor):
        self.provider = provider
        self.target = target
        self.state = NegotiationState.UNCHECKED
        self.error: Optional[Exception] = None

    def _fail(self, error: Exception, message: str) -> NetworkMismatch:
        self.state = NegotiationState.FAILED
        self.error = error
        logger.error("Network negotiation failed: %s (%s)", message, error)
        return NetworkMismatch(f"{message}: {error}", cause=error)

    async def negotiate(self) -> NegotiationState:
        """Drive the state machine to MATCHED or raise NetworkMismatch."""
        self.state = NegotiationState.UNCHECKED
        self.error = None

        try:
            current = await self.provider.chain_id()
        except Exception as e:
            raise self._fail(e, "Could not read the connected network") from e

        if self.target.matches(current):
            self.state = NegotiationState.MATCHED
            return self.state

        self.state = NegotiationState.MISMATCHED
        logger.info(
            "Connected to chain %s, switching to %s (%s)",
            current, self.target.chain_id, self.target.name,
        )

        try:
            await self.provider.switch_network(self.target.chain_id_hex)
        except RpcError as switch_error:
            if switch_error.code != UNRECOGNIZED_CHAIN:
                raise self._fail(switch_error, f"Switch to {self.target.name} refused") from switch_error

            logger.info("%s unknown to provider, registering it", self.target.name)
            try:
                await self.provider.register_network(self.target.to_provider_params())
            except Exception as e:
                raise self._fail(e, f"Registering {self.target.name} failed") from e
        except Exception as e:
            raise self._fail(e, f"Switch to {self.target.name} failed") from e

        self.state = NegotiationState.MATCHED
        logger.info("Network negotiated: %s", self.target.name)
        return self.state
