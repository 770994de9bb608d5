import numpy as np

_SQRT2 = np.sqrt(2)

_GATES = {
    "X": np.array([[0, 1], [1, 0]]),
    "Y": np.array([[0, -1j], [1j, 0]]),
    "Z": np.array([[1, 0], [0, -1]]),
    "H": np.array([[1, 1], [1, -1]]) / _SQRT2,
    "S": np.array([[1, 0], [0, 1j]]),
    "T": np.array([[1, 0], [0, np.exp(1j * np.pi / 4)]]),
    "CNOT": np.array([[1, 0, 0, 0], [0, 1, 0, 0], [0, 0, 0, 1], [0, 0, 1, 0]]),
    "CZ": np.array([[1, 0, 0, 0], [0, 1, 0, 0], [0, 0, 1, 0], [0, 0, 0, -1]]),
    "SWAP": np.array([[1, 0, 0, 0], [0, 0, 1, 0], [0, 1, 0, 0], [0, 0, 0, 1]]),
    "iSWAP": np.array([[1, 0, 0, 0], [0, 0, 1j, 0], [0, 1j, 0, 0], [0, 0, 0, 1]]),
    "sqrtISWAP": np.array(
        [
            [1, 0, 0, 0],
            [0, 1 / _SQRT2, 1j / _SQRT2, 0],
            [0, 1j / _SQRT2, 1 / _SQRT2, 0],
            [0, 0, 0, 1],
        ]
    ),
}
_GATES["CX"] = _GATES["CNOT"]


def get_gate(gate):
    """
    Return the matrix of a named gate as a complex array.

    Supported: 'X', 'Y', 'Z', 'H', 'S', 'T', 'CNOT' ('CX'), 'CZ', 'SWAP',
    'iSWAP', 'sqrtISWAP'.
    """
    if gate not in _GATES:
        raise ValueError(
            f"Unsupported gate '{gate}'. Please specify one of: "
            + ", ".join(sorted(_GATES))
        )
    return np.array(_GATES[gate], dtype=complex)


def is_unitary(U, atol=1e-8):
    U = np.asarray(U)
    if U.ndim != 2 or U.shape[0] != U.shape[1]:
        return False
    return bool(np.allclose(U.conj().T @ U, np.eye(U.shape[0]), atol=atol))
