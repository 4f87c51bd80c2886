import grpc
import pytest

import dapi_client.client as client_module
from core.exceptions import InvalidArgumentException
from dapi_client import CallOptions, PlatformPromiseClient, models
from dapi_client.interceptors.conversion import ConversionInterceptor
from dapi_client.transport import PLATFORM_METHODS, is_insecure


REQUESTS = {
    "apply_state_transition": models.ApplyStateTransitionRequest(state_transition=b"st"),
    "get_identity": models.GetIdentityRequest(id="id"),
    "get_data_contract": models.GetDataContractRequest(id="id"),
    "get_documents": models.GetDocumentsRequest(data_contract_id="id", document_type="note"),
    "get_identity_by_first_public_key": models.GetIdentityByFirstPublicKeyRequest(public_key_hash=b"h"),
    "get_identity_id_by_first_public_key": models.GetIdentityIdByFirstPublicKeyRequest(public_key_hash=b"h"),
}


class FakeTransport:
    """Stands in for PlatformTransportClient; completes every call immediately."""

    instances: list["FakeTransport"] = []

    def __init__(self, target, credentials, options):
        self.target = target
        self.credentials = credentials
        self.options = options
        self.calls = []
        self.error = None
        self.response = None
        self.closed = False
        FakeTransport.instances.append(self)

    def _call(self, name, request, metadata, options, callback):
        self.calls.append((name, request, metadata, options))
        callback(self.error, self.response)

    def apply_state_transition(self, request, metadata, options, callback):
        self._call("apply_state_transition", request, metadata, options, callback)

    def get_identity(self, request, metadata, options, callback):
        self._call("get_identity", request, metadata, options, callback)

    def get_data_contract(self, request, metadata, options, callback):
        self._call("get_data_contract", request, metadata, options, callback)

    def get_documents(self, request, metadata, options, callback):
        self._call("get_documents", request, metadata, options, callback)

    def get_identity_by_first_public_key(self, request, metadata, options, callback):
        self._call("get_identity_by_first_public_key", request, metadata, options, callback)

    def get_identity_id_by_first_public_key(self, request, metadata, options, callback):
        self._call("get_identity_id_by_first_public_key", request, metadata, options, callback)

    def close(self):
        self.closed = True


class FakeRpcError(grpc.RpcError):
    pass


class Passthrough(grpc.UnaryUnaryClientInterceptor):
    def intercept_unary_unary(self, continuation, client_call_details, request):
        return continuation(client_call_details, request)


@pytest.fixture
def fake_transport(monkeypatch):
    FakeTransport.instances.clear()
    monkeypatch.setattr(client_module, "PlatformTransportClient", FakeTransport)
    return FakeTransport


@pytest.fixture
def platform_client(fake_transport):
    return PlatformPromiseClient("127.0.0.1:3010")


def test_hostname_scheme_is_stripped(fake_transport):
    PlatformPromiseClient("https://host:443")

    assert fake_transport.instances[-1].target == "host:443"


def test_hostname_without_scheme_is_kept(fake_transport):
    PlatformPromiseClient("host:443")

    assert fake_transport.instances[-1].target == "host:443"


def test_default_credentials_are_insecure(fake_transport):
    PlatformPromiseClient("host:443")

    credentials = fake_transport.instances[-1].credentials
    assert isinstance(credentials, grpc.ChannelCredentials)
    assert is_insecure(credentials)


def test_explicit_credentials_are_passed_through(fake_transport):
    credentials = grpc.ssl_channel_credentials()
    PlatformPromiseClient("host:443", credentials, {"grpc.max_receive_message_length": 1024})

    transport = fake_transport.instances[-1]
    assert transport.credentials is credentials
    assert transport.options == {"grpc.max_receive_message_length": 1024}


def test_transport_methods_are_rebound_to_same_receiver(platform_client):
    transport = platform_client.client
    for name in PLATFORM_METHODS:
        rebound = getattr(transport, name)
        assert rebound.__wrapped__.__self__ is transport


@pytest.mark.parametrize("method", list(PLATFORM_METHODS))
@pytest.mark.parametrize("metadata", [[("key", "value")], "key=value", None, 42])
def test_invalid_metadata_raises_before_transport(platform_client, method, metadata):
    with pytest.raises(InvalidArgumentException) as ei:
        getattr(platform_client, method)(REQUESTS[method], metadata)

    assert ei.value.field == "metadata"
    assert platform_client.client.calls == []


def test_invalid_options_raise_before_transport(platform_client):
    with pytest.raises(InvalidArgumentException):
        platform_client.get_identity(REQUESTS["get_identity"], {}, ["timeout", 1])
    with pytest.raises(InvalidArgumentException):
        platform_client.get_identity(REQUESTS["get_identity"], {}, {"deadline": 1})

    assert platform_client.client.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("method", list(PLATFORM_METHODS))
async def test_call_attaches_single_conversion_interceptor(platform_client, method):
    platform_client.client.response = object()

    await getattr(platform_client, method)(REQUESTS[method], {"Authorization": "Bearer t"})

    name, request, metadata, options = platform_client.client.calls[0]
    assert name == method
    assert request is REQUESTS[method]
    assert metadata == (("authorization", "Bearer t"),)
    assert isinstance(options, CallOptions)
    assert len(options.interceptors) == 1
    assert isinstance(options.interceptors[0], ConversionInterceptor)


@pytest.mark.asyncio
async def test_resolves_with_transport_response(platform_client):
    response = models.GetIdentityResponse(identity=b"x")
    platform_client.client.response = response

    assert await platform_client.get_identity(REQUESTS["get_identity"]) is response


@pytest.mark.asyncio
@pytest.mark.parametrize("method", list(PLATFORM_METHODS))
async def test_transport_error_rejects_unchanged(platform_client, method):
    error = FakeRpcError("connection refused")
    platform_client.client.error = error

    with pytest.raises(FakeRpcError) as ei:
        await getattr(platform_client, method)(REQUESTS[method])

    assert ei.value is error


@pytest.mark.asyncio
async def test_caller_options_merge_with_injected_interceptor(platform_client):
    extra = Passthrough()

    await platform_client.get_identity(
        REQUESTS["get_identity"], {}, {"interceptors": [extra], "timeout": 3.0}
    )
    await platform_client.get_identity(
        REQUESTS["get_identity"], {}, CallOptions(interceptors=[extra], replace_interceptors=True)
    )

    merged = platform_client.client.calls[0][3]
    assert isinstance(merged.interceptors[0], ConversionInterceptor)
    assert merged.interceptors[1] is extra
    assert merged.timeout == 3.0

    replaced = platform_client.client.calls[1][3]
    assert replaced.interceptors == [extra]


@pytest.mark.asyncio
async def test_default_call_options_sit_between_injected_and_caller(fake_transport):
    default = Passthrough()
    caller = Passthrough()
    client = PlatformPromiseClient(
        "host:1", call_options=CallOptions(interceptors=[default], timeout=10.0, wait_for_ready=True)
    )

    await client.get_identity(REQUESTS["get_identity"], {}, {"interceptors": [caller], "timeout": 1.0})

    options = client.client.calls[0][3]
    assert options.interceptors[1:] == [default, caller]
    assert options.timeout == 1.0
    assert options.wait_for_ready is True


@pytest.mark.asyncio
@pytest.mark.parametrize("call_options", [
    CallOptions(interceptors=[Passthrough()], replace_interceptors=True),
    {"interceptors": [Passthrough()], "replace_interceptors": True},
])
async def test_default_call_options_cannot_drop_conversion_interceptor(fake_transport, call_options):
    client = PlatformPromiseClient("host:1", call_options=call_options)

    assert client.default_call_options.replace_interceptors is False

    await client.get_identity(REQUESTS["get_identity"])

    interceptors = client.client.calls[0][3].interceptors
    assert len(interceptors) == 2
    assert isinstance(interceptors[0], ConversionInterceptor)
    assert isinstance(interceptors[1], Passthrough)


def test_set_protocol_version_stores_value(platform_client):
    assert platform_client.protocol_version is None

    platform_client.set_protocol_version("0.12")
    platform_client.set_protocol_version("0.13")

    assert platform_client.protocol_version == "0.13"
    assert callable(platform_client.set_protocol_version)


def test_close_closes_transport(fake_transport):
    with PlatformPromiseClient("host:1") as client:
        pass

    assert client.client.closed is True
