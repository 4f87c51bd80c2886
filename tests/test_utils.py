import asyncio
import threading

import grpc
import pytest

from core.config import GrpcTlsSettings
from core.exceptions import InvalidArgumentException
from dapi_client import transport
from dapi_client.options import CallOptions
from dapi_client.transport import build_channel_credentials, insecure_credentials, is_insecure
from dapi_client.utils import promisify, strip_hostname


@pytest.mark.parametrize("hostname, expected", [
    ("https://host:443", "host:443"),
    ("http://127.0.0.1:3010", "127.0.0.1:3010"),
    ("grpc+tls://host", "host"),
    ("//host:1", "host:1"),
    ("host:443", "host:443"),
    ("dns:///host:443", "dns:///host:443"),
])
def test_strip_hostname(hostname, expected):
    assert strip_hostname(hostname) == expected


def test_call_options_coerce():
    assert CallOptions.coerce(None) == CallOptions()
    options = CallOptions(timeout=1.0)
    assert CallOptions.coerce(options) is options
    assert CallOptions.coerce({"timeout": 2.0}).timeout == 2.0

    with pytest.raises(InvalidArgumentException):
        CallOptions.coerce({"retries": 3})
    with pytest.raises(InvalidArgumentException):
        CallOptions.coerce("timeout=1")


def test_call_options_merge():
    a, b = object(), object()
    base = CallOptions(interceptors=[a], timeout=5.0, wait_for_ready=True)

    merged = base.merge(CallOptions(interceptors=[b], timeout=1.0))
    assert merged.interceptors == [a, b]
    assert merged.timeout == 1.0
    assert merged.wait_for_ready is True

    replaced = base.merge(CallOptions(interceptors=[b], replace_interceptors=True))
    assert replaced.interceptors == [b]
    assert replaced.timeout == 5.0

    copied = base.merge(None)
    assert copied == base
    assert copied.interceptors is not base.interceptors


def test_insecure_credentials_detection():
    assert is_insecure(insecure_credentials())
    assert is_insecure(grpc.experimental.insecure_channel_credentials())
    assert not is_insecure(grpc.ssl_channel_credentials())


@pytest.mark.parametrize("secure", [False, True])
def test_create_channel_picks_channel_kind(monkeypatch, secure):
    opened = []
    monkeypatch.setattr(
        transport.grpc, "insecure_channel",
        lambda target, options=None: opened.append(("insecure", target)),
    )
    monkeypatch.setattr(
        transport.grpc, "secure_channel",
        lambda target, credentials, options=None: opened.append(("secure", target)),
    )
    credentials = grpc.ssl_channel_credentials() if secure else insecure_credentials()

    transport.create_channel("host:1", credentials)

    assert opened == [("secure" if secure else "insecure", "host:1")]


def test_build_channel_credentials_requires_key_and_cert():
    with pytest.raises(RuntimeError):
        build_channel_credentials(GrpcTlsSettings(enabled=True, key="/tmp/client.key"))


def test_build_channel_credentials_reads_ca(tmp_path):
    ca = tmp_path / "ca.pem"
    ca.write_bytes(b"-----BEGIN CERTIFICATE-----\n-----END CERTIFICATE-----\n")

    credentials = build_channel_credentials(GrpcTlsSettings(enabled=True, ca=str(ca)))

    assert isinstance(credentials, grpc.ChannelCredentials)
    assert not is_insecure(credentials)


@pytest.mark.asyncio
async def test_promisify_resolves_from_other_thread():
    def work(value, callback):
        threading.Thread(target=callback, args=(None, value * 2)).start()

    assert await promisify(work)(21) == 42


@pytest.mark.asyncio
async def test_promisify_only_first_callback_counts():
    error = ValueError("boom")

    def work(callback):
        callback(error, None)
        callback(None, "late")

    with pytest.raises(ValueError) as ei:
        await promisify(work)()

    assert ei.value is error


@pytest.mark.asyncio
async def test_promisify_tolerates_cancelled_future():
    callbacks = []

    def work(callback):
        callbacks.append(callback)

    future = promisify(work)()
    future.cancel()
    callbacks[0](None, "done")
    await asyncio.sleep(0)

    assert future.cancelled()
