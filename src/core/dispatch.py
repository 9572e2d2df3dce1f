"""
Routage des commandes slash par arbre de noms.

Principes :
- Chaque commande racine est un `CommandNode` ; ses enfants sont des groupes ou des sous-commandes
- La résolution descend l'arbre un nom à la fois (racine -> groupe -> sous-commande) ;
  un nom inconnu à n'importe quel niveau lève `NoHandler`
- Une feuille porte un handler de commande et, optionnellement, un handler d'autocomplétion
- Le même arbre produit le schéma JSON envoyé à Discord : routage et déclaration ne divergent pas

Les erreurs de commande sont traduites en message utilisateur : le message public
d'une `CommandError`, sinon un message générique d'erreur interne.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

import discord
from discord import app_commands

from core.errors import CommandError, CommandValidationError, NoHandler, TempVoiceError

logger = logging.getLogger(__name__)

OptionType = discord.AppCommandOptionType

# Discord refuse plus de 25 suggestions
MAX_CHOICES = 25
# Longueur maximale d'un message Discord
MAX_CONTENT = 2000
# Limites Discord des noms et descriptions de commandes et d'options
MAX_NAME = 32
MAX_DESCRIPTION = 100
# Place gardée pour le marqueur de troncature "… (N de plus)"
_CLIP_RESERVE = 32

INTERNAL_ERROR_MESSAGE = "Erreur interne."


def check_naming(name: str, description: str) -> None:
    """Rejette un nom ou une description que Discord refuserait (tout le schéma serait rejeté)."""
    if not 1 <= len(name) <= MAX_NAME:
        raise ValueError(f"nom de commande invalide ({len(name)} caractères): {name!r}")
    if not 1 <= len(description) <= MAX_DESCRIPTION:
        raise ValueError(f"description de /{name} invalide ({len(description)} caractères, max {MAX_DESCRIPTION})")


def clip(content: str, limit: int = MAX_CONTENT) -> str:
    """
    Tronque un message trop long pour Discord.
    Les listes sont coupées à la ligne et terminées par "… (N de plus)", N étant le nombre de lignes omises.
    """
    if len(content) <= limit:
        return content
    lines = content.split("\n")
    kept: List[str] = []
    size = 0
    for line in lines:
        extra = len(line) + (1 if kept else 0)
        if size + extra > limit - _CLIP_RESERVE:
            break
        kept.append(line)
        size += extra
    if not kept:
        return content[:limit - 1] + "…"
    return "\n".join(kept) + f"\n… ({len(lines) - len(kept)} de plus)"


@dataclass(frozen=True)
class Option:
    name: str
    description: str
    type: OptionType = OptionType.string
    required: bool = False
    autocomplete: bool = False
    min_value: Optional[int] = None
    max_length: Optional[int] = None

    def __post_init__(self):
        check_naming(self.name, self.description)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "required": self.required,
        }
        if self.autocomplete:
            payload["autocomplete"] = True
        if self.min_value is not None:
            payload["min_value"] = self.min_value
        if self.max_length is not None:
            payload["max_length"] = self.max_length
        return payload


class CommandContext:
    """
    Contexte d'une interaction en cours de routage.

    Attributs principaux :
        interaction : interaction discord.py d'origine
        options : options du niveau courant (remplacées à chaque descente dans l'arbre)
        path : noms déjà résolus, pour les logs
    """

    def __init__(self, interaction: discord.Interaction, *, ephemeral: bool = True):
        self.interaction = interaction
        self.ephemeral = ephemeral
        data = interaction.data or {}
        self.name: str = data.get("name", "")  # type: ignore[assignment]
        self.options: List[Dict[str, Any]] = list(data.get("options", []) or [])  # type: ignore[arg-type]
        self.path: List[str] = [self.name]

    @property
    def is_autocomplete(self) -> bool:
        return self.interaction.type == discord.InteractionType.autocomplete

    @property
    def guild_id(self) -> Optional[int]:
        return self.interaction.guild_id

    def option_map(self) -> Dict[str, Dict[str, Any]]:
        return {opt["name"]: opt for opt in self.options}

    def option(self, name: str, default: Any = None) -> Any:
        opt = self.option_map().get(name)
        if opt is None:
            return default
        return opt.get("value", default)

    def focused(self) -> Tuple[Optional[str], str]:
        for opt in self.options:
            if opt.get("focused"):
                return opt["name"], str(opt.get("value") or "")
        return None, ""

    async def defer(self) -> None:
        if not self.interaction.response.is_done():
            await self.interaction.response.defer(ephemeral=self.ephemeral, thinking=True)

    async def text(self, content: str) -> None:
        # Une interaction n'accepte qu'une réponse : ensuite on édite la réponse d'origine
        if not self.interaction.response.is_done():
            await self.interaction.response.send_message(clip(content), ephemeral=self.ephemeral)
        else:
            await self.interaction.edit_original_response(content=clip(content))

    async def choices(self, choices: Sequence[app_commands.Choice]) -> None:
        await self.interaction.response.autocomplete(list(choices)[:MAX_CHOICES])


HandleFunc = Callable[[CommandContext], Awaitable[Any]]


class CommandNode:
    """Noeud de l'arbre : commande racine, groupe ou sous-commande."""

    def __init__(
        self,
        name: str,
        description: str = "-",
        *,
        handler: Optional[HandleFunc] = None,
        options: Sequence[Option] = (),
        default_permissions: Optional[int] = None,
    ):
        check_naming(name, description)
        self.name = name
        self.description = description
        self.handler = handler
        self.autocomplete_handler: Optional[HandleFunc] = None
        self.options = list(options)
        self.default_permissions = default_permissions
        self.children: Dict[str, CommandNode] = {}

    def add(self, node: "CommandNode") -> "CommandNode":
        if self.handler is not None or self.options:
            raise ValueError(f"/{self.name} est une feuille, impossible d'y ajouter {node.name}")
        if node.name in self.children:
            raise ValueError(f"{node.name} déjà défini sous /{self.name}")
        self.children[node.name] = node
        return node

    def group(self, name: str, description: str = "-") -> "CommandNode":
        return self.add(CommandNode(name, description))

    def command(self, name: str, description: str = "-", *, options: Sequence[Option] = ()):
        def decorator(func: HandleFunc) -> "CommandNode":
            return self.add(CommandNode(name, description, handler=func, options=options))
        return decorator

    def autocomplete(self, func: HandleFunc) -> HandleFunc:
        self.autocomplete_handler = func
        return func

    def to_payload(self, depth: int = 0) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": self.name, "description": self.description}
        if depth == 0:
            payload["type"] = discord.AppCommandType.chat_input.value
            payload["dm_permission"] = False
            if self.default_permissions is not None:
                payload["default_member_permissions"] = str(self.default_permissions)
        elif self.children:
            payload["type"] = OptionType.subcommand_group.value
        else:
            payload["type"] = OptionType.subcommand.value
        if self.children:
            payload["options"] = [child.to_payload(depth + 1) for child in self.children.values()]
        elif self.options:
            payload["options"] = [opt.to_payload() for opt in self.options]
        return payload


class CommandDispatcher:
    def __init__(self):
        self.roots: Dict[str, CommandNode] = {}

    def add(self, node: CommandNode) -> CommandNode:
        if node.name in self.roots:
            raise ValueError(f"commande /{node.name} déjà enregistrée")
        self.roots[node.name] = node
        return node

    def payload(self) -> List[Dict[str, Any]]:
        return [node.to_payload() for node in self.roots.values()]

    def resolve(self, ctx: CommandContext) -> CommandNode:
        node = self.roots.get(ctx.name)
        if node is None:
            raise NoHandler(ctx.path)
        while node.children:
            head = ctx.options[0] if ctx.options else None
            child = node.children.get(head["name"]) if head else None
            if child is None:
                raise NoHandler(ctx.path + [head["name"] if head else ""])
            ctx.path.append(child.name)
            ctx.options = list(head.get("options", []) or [])
            node = child
        return node

    async def dispatch(self, interaction: discord.Interaction) -> None:
        if interaction.type not in (discord.InteractionType.application_command, discord.InteractionType.autocomplete):
            return
        ctx = CommandContext(interaction)
        try:
            node = self.resolve(ctx)
            handler = node.autocomplete_handler if ctx.is_autocomplete else node.handler
            if handler is None:
                raise NoHandler(ctx.path)
            await handler(ctx)
        except Exception as exc:  # noqa: BLE001
            await self._on_error(ctx, exc)

    async def _on_error(self, ctx: CommandContext, exc: BaseException) -> None:
        path = " ".join(ctx.path)
        if ctx.is_autocomplete:
            logger.error("Echec autocomplétion /%s: %s", path, exc, exc_info=not isinstance(exc, TempVoiceError))
            return
        if isinstance(exc, CommandValidationError):
            logger.info("Commande /%s refusée: %s", path, exc)
        elif isinstance(exc, TempVoiceError):
            logger.error("Echec commande /%s: %s", path, exc)
        else:
            logger.error("Erreur inattendue commande /%s", path, exc_info=exc)
        message = exc.public_message if isinstance(exc, CommandError) else INTERNAL_ERROR_MESSAGE
        try:
            await ctx.text(message)
        except discord.HTTPException:
            logger.warning("Impossible de répondre à /%s", path, exc_info=True)


__all__ = ["Option", "OptionType", "CommandContext", "CommandNode", "CommandDispatcher", "MAX_CHOICES", "clip"]
