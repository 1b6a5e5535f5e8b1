# Nginx Manager Deploy v1.0
from abc import ABC, abstractmethod


class BaseInstaller(ABC):
    '''
    Base class for compose-deployed app installers
    '''

    def __init__(self, manifest, settings):
        self.manifest = manifest
        self.settings = settings
        self.app_name = manifest['name']

    @abstractmethod
    def check_dependencies(self):
        '''True when the container runtime is usable'''

    @abstractmethod
    def get_configuration(self, record=None):
        '''Ask the operator for a configuration record, None if declined'''

    @abstractmethod
    def install(self, config=None):
        '''Deploy the stack; True on success'''

    def verify_installation(self, record):
        # Nothing to probe by default
        return True
