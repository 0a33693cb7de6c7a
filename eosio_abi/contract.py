"""
Contract facade: one ABI document, its resolved schema and a bound codec.

Maps action and table names to their struct types so callers can work in the
chain's vocabulary::

    abi = ContractAbi.from_json(raw_abi, account="eosio.token")
    payload = abi.encode_action_data("transfer", {"from": "alice", ...})
    row = abi.decode_table_row("accounts", raw_row)
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional, Union

from .codec import BinaryCodec
from .config import DEFAULT_CONFIG, CodecConfig
from .document import AbiAction, AbiDocument
from .errors import UnknownAction, UnknownTable
from .resolver import resolve
from .schema import ResolvedStructSchema

__all__ = ["ContractAbi", "clean_ricardian"]

log = logging.getLogger(__name__)

_URL_RE = re.compile(r"(https?|ftp)://[^\s$.?#].[^\s]*$", re.MULTILINE)
_ICON_RE = re.compile(r"icon:", re.MULTILINE)
_NOWRAP_RE = re.compile(r"(\s)?nowrap(\s)?", re.MULTILINE)


def clean_ricardian(text: str) -> str:
    """Strip trailing URLs, ``icon:`` markers and ``nowrap`` tokens from ricardian text."""
    text = _URL_RE.sub("", text)
    text = _ICON_RE.sub("", text)
    return _NOWRAP_RE.sub("", text)


class ContractAbi:
    def __init__(
        self,
        document: AbiDocument,
        *,
        account: str = "",
        config: CodecConfig = DEFAULT_CONFIG,
        schema: Optional[ResolvedStructSchema] = None,
    ) -> None:
        self.document = document
        self.account = account
        self.schema = schema if schema is not None else resolve(document)
        self.codec = BinaryCodec(self.schema, config=config)
        log.debug(
            "contract %s: %d actions, %d tables",
            account or "<anonymous>",
            len(document.actions),
            len(document.tables),
        )

    @classmethod
    def from_json(
        cls,
        abi: Union[Mapping[str, Any], str, bytes],
        *,
        account: str = "",
        config: CodecConfig = DEFAULT_CONFIG,
    ) -> "ContractAbi":
        return cls(AbiDocument.from_json(abi), account=account, config=config)

    def __repr__(self) -> str:
        return f"ContractAbi(account={self.account!r}, structs={len(self.schema)})"

    # ── lookups ──────────────────────────────────────────────────────────────

    def _action(self, action: str) -> AbiAction:
        a = self.document.action(action)
        if a is None:
            raise UnknownAction(f"action {action!r} not in ABI", action=action, account=self.account)
        return a

    def action_type(self, action: str) -> str:
        return self._action(action).type

    def table_type(self, table: str) -> str:
        t = self.document.table(table)
        if t is None:
            raise UnknownTable(f"table {table!r} not in ABI", table=table, account=self.account)
        return t.type

    def action_description(self, action: str) -> str:
        return clean_ricardian(self._action(action).ricardian_contract)

    # ── codec shortcuts ──────────────────────────────────────────────────────

    def encode_action_data(self, action: str, data: Mapping[str, Any]) -> bytes:
        return self.codec.encode(self.action_type(action), data)

    def decode_action_data(self, action: str, raw: Union[bytes, str]) -> Any:
        if isinstance(raw, str):
            return self.codec.decode_hex(self.action_type(action), raw)
        return self.codec.decode(self.action_type(action), raw)

    def encode_table_row(self, table: str, row: Mapping[str, Any]) -> bytes:
        return self.codec.encode(self.table_type(table), row)

    def decode_table_row(self, table: str, raw: Union[bytes, str]) -> Any:
        if isinstance(raw, str):
            return self.codec.decode_hex(self.table_type(table), raw)
        return self.codec.decode(self.table_type(table), raw)
