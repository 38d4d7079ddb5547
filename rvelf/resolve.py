from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from .container import Symbol


class NameResolver:
    """Map an address to a symbol name, else a synthetic label, else None."""

    def __init__(self, symbols: Iterable[Symbol], labels: Mapping[int, str]):
        self._symbols: Dict[int, str] = {}
        for sym in symbols:
            if sym.name:
                # first symbol in table order wins
                self._symbols.setdefault(sym.value, sym.name)
        self.labels = MappingProxyType(dict(labels))

    def resolve(self, addr: int) -> Optional[str]:
        name = self._symbols.get(addr)
        if name is not None:
            return name
        return self.labels.get(addr)
