"""SynodHub: data access and account lifecycle for the synod administration system"""

__version__ = "1.0.0"
