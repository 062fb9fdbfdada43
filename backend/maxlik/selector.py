from __future__ import annotations

import random
from typing import Optional, Tuple

from .models import CaseStudy, Module


def pick_topic_and_case(module: Module, rng: Optional[random.Random] = None) -> Tuple[str, CaseStudy]:
    # Topic and case are drawn independently
    source = rng or random
    topic = source.choice(module.topics)
    case = source.choice(module.cases)
    return topic, case
