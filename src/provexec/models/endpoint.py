"""
Remote management endpoint model.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..validation.exceptions import ThumbprintRetrievalError


@dataclass
class Endpoint:
    """
    Host and credentials used to authenticate against a remote management CLI.

    The certificate thumbprint is discovered lazily by the first command sent
    to the endpoint and cached here for every later call on this instance.
    """

    host: str
    user: str
    password: str = field(repr=False)
    thumbprint: Optional[str] = None

    def remember_thumbprint(self, thumbprint: str) -> str:
        """
        Cache a probed thumbprint on this endpoint.

        Storing the same value again is a no-op, so two concurrent first-time
        probes that derive the same thumbprint are harmless.

        Raises:
            ThumbprintRetrievalError: If a different thumbprint is already cached
        """
        if self.thumbprint is not None and self.thumbprint != thumbprint:
            raise ThumbprintRetrievalError(
                f"Endpoint {self.host} already has thumbprint {self.thumbprint}, "
                f"refusing to replace it with {thumbprint}"
            )
        self.thumbprint = thumbprint
        return thumbprint
