import os

import numpy as np
import scipy.sparse as sp
import torch

from ctrl_trajectories.utils.conversion import array_to_tensor
from ctrl_trajectories.utils.device import resolve_cpu_cores, select_device
from ctrl_trajectories.utils.utility_functions import set_cores


def test_select_device_cpu():
    device, backend = select_device("cpu")
    assert backend == "cpu"
    assert device.type == "cpu"


def test_select_device_gpu_with_cuda_available(monkeypatch):
    monkeypatch.setattr(torch.cuda, "is_available", lambda: True)
    device, backend = select_device("gpu")
    assert backend == "cuda"
    assert device.type == "cuda"


def test_select_device_gpu_without_cuda(monkeypatch, caplog):
    monkeypatch.setattr(torch.cuda, "is_available", lambda: False)
    with caplog.at_level("WARNING"):
        device, backend = select_device("gpu")
        assert backend == "cpu"
        assert device.type == "cpu"
        assert any("falling back to CPU" in rec.message for rec in caplog.records)


def test_resolve_cpu_cores_default(monkeypatch):
    monkeypatch.setattr(os, "cpu_count", lambda: 8)
    assert resolve_cpu_cores(None) == 7


def test_resolve_cpu_cores_clamp_high_low(monkeypatch):
    monkeypatch.setattr(os, "cpu_count", lambda: 4)
    assert resolve_cpu_cores(100) == 4
    assert resolve_cpu_cores(0) == 1
    assert resolve_cpu_cores(-3) == 1
    assert resolve_cpu_cores(3) == 3


def test_set_cores(monkeypatch):
    calls = []
    monkeypatch.setattr(os, "cpu_count", lambda: 4)
    monkeypatch.setattr(torch, "set_num_threads", lambda n: calls.append(n))
    assert set_cores(None) == 3
    assert set_cores(16) == 4
    assert calls == [3, 4]


def test_array_to_tensor_sparse():
    op = sp.csr_matrix(np.array([[0, 1j], [-1j, 0]]))
    t = array_to_tensor(op)
    assert t.dtype == torch.complex128
    np.testing.assert_allclose(t.numpy(), op.toarray())


def test_array_to_tensor_scalars_and_lists():
    assert array_to_tensor(2.5).dtype == torch.float64
    assert array_to_tensor(1j).dtype == torch.complex128
    assert array_to_tensor([1.0, 2.0]).shape == (2,)
    t = torch.ones(2)
    assert array_to_tensor(t, dtype=torch.complex64).dtype == torch.complex64
