"""Uniform [0, 1) random sources consumed by the sampler."""

import itertools

import mlx.core as mx


class KeyedUniform:
    """Uniform source driven by an explicit MLX random key.

    Uniforms are generated in blocks of ``block_size`` with a fresh subkey
    per block, so a given seed always yields the same stream. Each value
    is built from two 32-bit words and has 53 bits of resolution, the
    full precision of a Python float.

    Parameters
    ----------
    seed : int, optional
        Seed used to build the key when ``key`` is not given (default: 0)
    key : mlx.core.array, optional
        Random key to start from
    block_size : int, optional
        Number of uniforms drawn per refill (default: 1024)

    Examples
    --------
    >>> uniform = KeyedUniform(seed=42)
    >>> u = uniform()
    """

    def __init__(self, seed=0, key=None, block_size=1024):
        if block_size < 1:
            raise ValueError("block_size must be positive")
        self.key = mx.random.key(seed) if key is None else key
        self.block_size = block_size
        self._block = []
        self._pos = 0

    def _refill(self):
        self.key, subkey = mx.random.split(self.key)
        # 27 high bits and 26 low bits make one 53-bit mantissa
        words = mx.random.bits(shape=(self.block_size, 2), key=subkey).tolist()
        self._block = [
            ((hi >> 5) * 67108864 + (lo >> 6)) / 9007199254740992.0
            for hi, lo in words
        ]
        self._pos = 0

    def __call__(self):
        if self._pos >= len(self._block):
            self._refill()
        value = self._block[self._pos]
        self._pos += 1
        return float(value)


class SequenceUniform:
    """Replays a fixed sequence of uniforms.

    Used for deterministic regression runs. With ``cycle=False`` the
    source raises ``StopIteration`` once the sequence is used up.
    """

    def __init__(self, values, cycle=True):
        values = [float(v) for v in values]
        for v in values:
            if not 0.0 <= v < 1.0:
                raise ValueError(f"uniform value {v} outside [0, 1)")
        self.values = values
        self._iter = itertools.cycle(values) if cycle else iter(values)

    def __call__(self):
        return next(self._iter)
