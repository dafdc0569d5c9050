"""Bridge layer between the pipeline and its remote backends.

Modules
-------
transform
    ``ImageTransformer`` protocol and the ``httpx``-based img2img client.
publisher
    ``ContentPublisher`` protocol with the NFT.Storage-compatible remote
    publisher and the local content-addressed publisher.

Backends are constructor-injected with a ``ClientConfig``; none of them
retries or holds per-call state.
"""
