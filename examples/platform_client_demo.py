"""PlatformPromiseClient 使用示例

Reads the endpoint from PLATFORM__ADDRESS (default 127.0.0.1:3010).
"""
import asyncio

import grpc

from core.exceptions import ConversionException
from dapi_client import PlatformPromiseClient
from dapi_client.models import GetDataContractRequest, GetIdentityRequest


async def main():
    with PlatformPromiseClient.from_settings() as client:
        print("= 并发请求 =")
        results = await asyncio.gather(
            client.get_identity(GetIdentityRequest(id="5rmLHY8ANxn8PCqgKmR6qFAC7ZNTtNrDAoaoQGSQXA3S")),
            client.get_data_contract(GetDataContractRequest(id="GWRSAVFMjXx8HpQFaNJMqBV7MBgMK4br5UESsB4S31Ec")),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, grpc.RpcError):
                print(f"RPC 失败: {result.code()} {result.details()}")
            elif isinstance(result, ConversionException):
                print(f"响应解析失败: {result.message}")
            else:
                print(f"成功: {result!r}")


if __name__ == "__main__":
    asyncio.run(main())
