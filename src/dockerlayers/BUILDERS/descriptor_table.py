# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Static table describing what each Dockerfile instruction does to a build.
"""
from types import MappingProxyType
from typing import Mapping, Tuple

from ..MODELS.layer_report import Descriptor, Effect

_TEXT_ONLY = "Cache is tied to the instruction text only."

INSTRUCTION_DESCRIPTORS: Mapping[str, Descriptor] = MappingProxyType({
    "FROM": Descriptor(
        effect=Effect.STAGE_START,
        explanation="Starts a stage and pulls the referenced base image. Any cache from previous stages is discarded.",
        cache_hint="Invalidates when the base image digest or flags like --platform change.",
    ),
    "RUN": Descriptor(
        effect=Effect.FILESYSTEM,
        explanation="Executes a shell command inside an intermediate container and commits the result as a new, immutable layer.",
        cache_hint="Cache key is the command text plus every file the command reads. Changing any of them busts the cache.",
    ),
    "COPY": Descriptor(
        effect=Effect.FILESYSTEM,
        explanation="Copies files into the image and creates a new layer with their contents.",
        cache_hint="Any change in the source files or flags invalidates this layer's cache entry.",
    ),
    "ADD": Descriptor(
        effect=Effect.FILESYSTEM,
        explanation="Behaves like COPY but also accepts remote URLs and auto-extracts tar archives, all of which produce new layers.",
        cache_hint="Cache depends on the archive/URL content as well as the instruction text.",
    ),
    "CMD": Descriptor(
        effect=Effect.METADATA,
        explanation="Sets the default command for containers created from the image. No filesystem changes occur.",
        cache_hint=_TEXT_ONLY,
    ),
    "ENTRYPOINT": Descriptor(
        effect=Effect.METADATA,
        explanation="Defines the executable that always runs when a container starts.",
        cache_hint=_TEXT_ONLY,
    ),
    "ENV": Descriptor(
        effect=Effect.METADATA,
        explanation="Persists environment variables into image metadata for future instructions and containers.",
        cache_hint="Any variable value change invalidates the cache for this step and later steps.",
    ),
    "ARG": Descriptor(
        effect=Effect.BUILD_ARG,
        explanation="Defines build-time arguments. The value can influence cache keys but does not end up in the final image runtime environment.",
        cache_hint="Changing build args invalidates the layer that consumes them.",
    ),
    "WORKDIR": Descriptor(
        effect=Effect.METADATA,
        explanation="Sets the working directory for subsequent instructions, recorded as metadata.",
        cache_hint="Cache busts only when the path changes.",
    ),
    "USER": Descriptor(
        effect=Effect.METADATA,
        explanation="Configures the user/group used for following instructions and containers.",
        cache_hint="Cache busts when the user specification changes.",
    ),
    "LABEL": Descriptor(
        effect=Effect.METADATA,
        explanation="Adds metadata key/value pairs to the image manifest without touching the filesystem.",
        cache_hint="Cache invalidates when a label changes.",
    ),
    "EXPOSE": Descriptor(
        effect=Effect.METADATA,
        explanation="Documents which ports containers are expected to listen on. Pure metadata.",
        cache_hint="Cache invalidates when the exposed ports change.",
    ),
    "VOLUME": Descriptor(
        effect=Effect.METADATA,
        explanation="Declares mount points that become anonymous volumes at runtime.",
        cache_hint="Cache depends only on the instruction text.",
    ),
    "HEALTHCHECK": Descriptor(
        effect=Effect.METADATA,
        explanation="Stores a command for Docker to probe container health. No filesystem changes.",
        cache_hint="Cache invalidates when the command or interval flags change.",
    ),
    "STOPSIGNAL": Descriptor(
        effect=Effect.METADATA,
        explanation="Configures which signal Docker sends to stop the container.",
        cache_hint="Cache depends on the instruction text.",
    ),
    "SHELL": Descriptor(
        effect=Effect.METADATA,
        explanation="Overrides the default shell that RUN and similar instructions use.",
        cache_hint="Cache invalidates when the shell definition changes.",
    ),
    "ONBUILD": Descriptor(
        effect=Effect.METADATA,
        explanation="Registers a trigger that fires when the current image is used as a base in another Dockerfile.",
        cache_hint="Cache ties to the trigger content.",
    ),
    "MAINTAINER": Descriptor(
        effect=Effect.METADATA,
        explanation="Deprecated metadata about the author. Included here for completeness.",
        cache_hint="Cache invalidates when the value changes.",
    ),
})

# Unknown directives (newer Docker releases, typos) degrade to metadata.
FALLBACK_DESCRIPTOR = Descriptor(
    effect=Effect.METADATA,
    explanation="Recorded as metadata. It influences how containers start but does not add filesystem content.",
    cache_hint="Cache key ties to the literal instruction, so changing text invalidates the layer.",
)

LEGEND: Tuple[Tuple[Effect, str], ...] = (
    (Effect.STAGE_START, "Pulls or resets a stage."),
    (Effect.FILESYSTEM, "Adds or mutates files, affecting image size and cache."),
    (Effect.METADATA, "Adjusts container config without changing files."),
    (Effect.BUILD_ARG, "Build-only inputs that do not persist in the image."),
)


def descriptor_for(keyword: str) -> Descriptor:
    """
    Looks up the descriptor for an upper-cased instruction keyword.

    :param keyword: Instruction keyword, e.g. ``RUN``.
    :return: The matching descriptor, or ``FALLBACK_DESCRIPTOR``.
    """
    return INSTRUCTION_DESCRIPTORS.get(keyword, FALLBACK_DESCRIPTOR)
