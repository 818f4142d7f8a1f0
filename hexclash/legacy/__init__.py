"""The earlier acknowledgement-based protocol: its primitives, a threaded packet connection and its client."""