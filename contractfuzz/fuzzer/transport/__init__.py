from contractfuzz.fuzzer.transport.http_transport import HttpTransport, TransportResponse

__all__ = ["HttpTransport", "TransportResponse"]
