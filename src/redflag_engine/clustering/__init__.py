# Topic clustering of message batches

from .schemas import TopicCluster, TopicClusteringResult
from .topic_clusterer import TopicClusterer, TopicClustererOptions

__all__ = [
    "TopicCluster",
    "TopicClusteringResult",
    "TopicClusterer",
    "TopicClustererOptions",
]
