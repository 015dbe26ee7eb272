from .interaction_store import InteractionStore, PublicationCheck, pair_key

__all__ = ['InteractionStore', 'PublicationCheck', 'pair_key']
