import logging

import openstack
from keystoneauth1 import exceptions as ks_exceptions
from openstack import exceptions as sdk_exceptions

from vmigrate.exceptions import AuthenticationError

logger = logging.getLogger('vmigrate')


class ConnectionManager:
    """
    Owns the openstacksdk connection to the compute control plane.

    With no cloud name the connection is built from OS_CLOUD or the OS_*
    environment variables, like the openstack CLI does.
    """

    def __init__(self, cloud=None, logger=logger):
        self.cloud = cloud or None
        self.logger = logger
        self.connection = None

    def connect(self):
        if self.connection is not None:
            return self.connection
        try:
            self.connection = openstack.connect(cloud=self.cloud)
        except (sdk_exceptions.SDKException, ks_exceptions.ClientException) as e:
            raise AuthenticationError(f"Unable to configure OpenStack connection: {e}") from e
        target = f"cloud '{self.cloud}'" if self.cloud else "environment credentials"
        self.logger.debug(f"[ConnectionManager] Connection configured from {target}")
        return self.connection

    def authenticate(self):
        """
        Verify the credentials by issuing a token.
        Returns True on success, False when the control plane rejects them.
        """
        connection = self.connect()
        try:
            connection.authorize()
        except (sdk_exceptions.SDKException, ks_exceptions.ClientException) as e:
            self.logger.debug(f"[ConnectionManager] Token issue failed: {e}")
            return False
        return True

    def require_authentication(self):
        if not self.authenticate():
            raise AuthenticationError(
                "OpenStack authentication failed. Please source your OpenStack credentials and try again")
        self.logger.info("OpenStack authentication successful")

    def disconnect(self):
        if self.connection is None:
            return
        try:
            self.connection.close()
        finally:
            self.connection = None
        self.logger.debug("[ConnectionManager] Disconnected from OpenStack")
