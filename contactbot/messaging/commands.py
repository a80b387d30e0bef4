"""Slash-command dispatcher -- contact conversion, renaming, and user management.

Multi-file outputs (``/cv``, ``/pv``, ``/pt``) go through the
:class:`~contactbot.delivery.group_sender.GroupSender`; single-file outputs
are sent directly and deleted once the send settles.
"""

from __future__ import annotations

import logging
import re
import shutil
import uuid
from collections.abc import Awaitable, Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..config.settings import cfg
from ..contacts.models import SUPPORTED_EXTENSIONS, Contact, ContactFormatError
from ..contacts.parsers import extension_of, parse_upload
from ..contacts.writers import (
    number_contacts,
    sanitize_file_name,
    split_evenly,
    write_txt,
    write_vcf,
)
from ..delivery.group_sender import GroupSender
from ..delivery.storage import FileRef
from ..state.chat_session import AdminConvertState, ChatSession, SessionStore, UploadedFile
from ..state.user_store import UserStore
from ..util.async_helpers import run_sync
from . import texts
from .transport import BotTransport

logger = logging.getLogger(__name__)

ReplyFn = Callable[[str], Awaitable[None]]

_NAME = r"(\D+?)"
_NUM = r"(\d+)"
_CV_ARGS = re.compile(rf"{_NAME}\s+{_NUM}\s+{_NAME}\s+{_NUM}\s*")
_AN_SINGLE_ARGS = re.compile(rf"{_NAME}\s+{_NUM}\s+{_NAME}\s*")
_AN_DUAL_ARGS = re.compile(rf"{_NAME}\s+{_NUM}\s+{_NAME}\s+{_NUM}\s+{_NAME}\s*")
_SPLIT_ARGS = re.compile(rf"{_NAME}\s+{_NUM}\s*")
_MERGE_ARGS = re.compile(rf"{_NAME}\s*")
_USER_ID_ARGS = re.compile(r"(\d+).*", re.DOTALL)


@dataclass
class CommandContext:
    text: str
    user_id: str
    reply: ReplyFn
    ref: Any
    session: ChatSession

    @property
    def command(self) -> str:
        head = self.text.split(maxsplit=1)[0] if self.text.strip() else ""
        return head.split("@", 1)[0].lower()

    @property
    def args(self) -> str:
        parts = self.text.strip().split(maxsplit=1)
        return parts[1].strip() if len(parts) > 1 else ""


class CommandDispatcher:
    _COMMANDS: dict[str, str] = {
        "/start": "_cmd_start",
        "/menu": "_cmd_menu",
        "/id": "_cmd_id",
        "/add": "_cmd_add",
        "/remove": "_cmd_remove",
        "/cv": "_cmd_cv",
        "/an": "_cmd_an",
        "/pv": "_cmd_pv",
        "/pt": "_cmd_pt",
        "/gv": "_cmd_gv",
        "/gt": "_cmd_gt",
        "/ct": "_cmd_ct",
        "/vt": "_cmd_vt",
        "/xt": "_cmd_xt",
        "/rename": "_cmd_rename",
        "/anc": "_cmd_anc",
        "/clear": "_cmd_clear",
    }

    def __init__(
        self,
        sessions: SessionStore,
        users: UserStore,
        transport: BotTransport,
        sender: GroupSender,
        output_root: Path | None = None,
    ) -> None:
        self._sessions = sessions
        self._users = users
        self._transport = transport
        self._sender = sender
        self._output_root = output_root or cfg.outgoing_dir

    # -- entry points ------------------------------------------------------

    async def handle_text(self, ctx: CommandContext) -> bool:
        """Run a command, or feed the ``/anc`` dialogue. Returns whether handled."""
        handler_name = self._COMMANDS.get(ctx.command)
        if handler_name:
            await getattr(self, handler_name)(ctx)
            return True
        if ctx.session.admin_convert is not None and not ctx.text.startswith("/"):
            await self._admin_convert_step(ctx)
            return True
        return False

    async def handle_document(self, ctx: CommandContext, filename: str, data: bytes) -> None:
        ext = extension_of(filename)
        if ext not in SUPPORTED_EXTENSIONS:
            await ctx.reply(texts.INVALID_FORMAT)
            return

        await ctx.reply(texts.PROCESSING)
        try:
            contacts = await run_sync(parse_upload, filename, data)
        except ContactFormatError as exc:
            logger.warning("Could not parse %s: %s", filename, exc)
            await ctx.reply(texts.UPLOAD_FAILED)
            return

        if ext == ".vcf":
            ctx.session.uploaded_vcards.append(UploadedFile(name=filename, data=data))
            await ctx.reply(
                "✅ File VCF berhasil diupload. Untuk rename dan kirim ulang, gunakan perintah:\n"
                "/rename <nama_baru>\nContoh: /rename kontak"
            )
            if not contacts:
                return
        elif not contacts:
            await ctx.reply(f"❌ Tidak ada nomor kontak yang valid dalam file: {filename}")
            return

        ctx.session.add_contacts(contacts)
        await ctx.reply(texts.processed_box(len(ctx.session.contacts)))

    # -- helpers -----------------------------------------------------------

    @contextmanager
    def _job_dir(self) -> Iterator[Path]:
        path = self._output_root / uuid.uuid4().hex[:12]
        path.mkdir(parents=True, exist_ok=True)
        try:
            yield path
        finally:
            shutil.rmtree(path, ignore_errors=True)

    async def _send_single(self, ctx: CommandContext, file: FileRef, caption: str) -> None:
        try:
            await self._transport.send_document(ctx.ref, file, caption)
        finally:
            file.path.unlink(missing_ok=True)

    async def _require_contacts(self, ctx: CommandContext) -> list[Contact] | None:
        if not ctx.session.has_contacts:
            await ctx.reply(texts.NEED_CONTACTS)
            return None
        return list(ctx.session.contacts)

    async def _require_admin(self, ctx: CommandContext) -> bool:
        if not self._users.is_admin(ctx.user_id):
            await ctx.reply(texts.ADMIN_ONLY)
            return False
        return True

    # -- info / session ----------------------------------------------------

    async def _cmd_start(self, ctx: CommandContext) -> None:
        await ctx.reply(texts.WELCOME)

    async def _cmd_menu(self, ctx: CommandContext) -> None:
        await ctx.reply(texts.MENU)

    async def _cmd_id(self, ctx: CommandContext) -> None:
        await ctx.reply(f"🆔 ID Anda: {ctx.user_id}")

    async def _cmd_clear(self, ctx: CommandContext) -> None:
        self._sessions.reset(ctx.user_id)
        await ctx.reply(texts.SESSION_CLEARED)

    # -- user management ---------------------------------------------------

    async def _cmd_add(self, ctx: CommandContext) -> None:
        if not await self._require_admin(ctx):
            return
        match = _USER_ID_ARGS.fullmatch(ctx.args)
        if not match:
            await ctx.reply("Format: /add <user_id>")
            return
        _, message = self._users.add_user(match.group(1))
        await ctx.reply(message)

    async def _cmd_remove(self, ctx: CommandContext) -> None:
        if not await self._require_admin(ctx):
            return
        match = _USER_ID_ARGS.fullmatch(ctx.args)
        if not match:
            await ctx.reply("Format: /remove <user_id>")
            return
        _, message = self._users.remove_user(match.group(1))
        await ctx.reply(message)

    # -- split commands (grouped delivery) ---------------------------------

    async def _cmd_cv(self, ctx: CommandContext) -> None:
        contacts = await self._require_contacts(ctx)
        if contacts is None:
            return
        match = _CV_ARGS.fullmatch(ctx.args)
        if not match:
            await ctx.reply(texts.USAGE_CV)
            return

        prefix = match.group(1).strip()
        parts = int(match.group(2))
        file_name = match.group(3).strip()
        start = int(match.group(4))
        if parts < 1 or start < 1:
            await ctx.reply("❌ Nomor pembagi dan nomor awal harus lebih besar dari 0")
            return

        try:
            groups = split_evenly(contacts, parts)
            await ctx.reply("🔄 Memulai proses konversi...")
            with self._job_dir() as workdir:
                files = [
                    await run_sync(write_vcf, workdir, f"{file_name} {start + i}", number_contacts(group, prefix))
                    for i, group in enumerate(groups)
                ]
                outcome = await self._sender.deliver(ctx.ref, files, ctx.reply)

            await ctx.reply(texts.delivery_summary(
                len(contacts),
                outcome.success_count,
                outcome.failed_count,
                len(contacts) // parts,
                [
                    f"• Format Nama: {prefix} 1 sampai {prefix} {len(contacts)}",
                    f"• Nama File: {file_name} {start} sampai {file_name} {start + len(files) - 1}",
                ],
                headline="Konversi selesai!",
            ))
        except Exception as exc:
            logger.error("Conversion error: %s", exc, exc_info=True)
            await ctx.reply(texts.CONVERSION_FAILED)
        finally:
            self._sessions.reset(ctx.user_id)

    async def _split_and_deliver(
        self,
        ctx: CommandContext,
        command: str,
        ext: str,
        writer: Callable[[Path, str, Sequence[Contact]], FileRef],
    ) -> None:
        match = _SPLIT_ARGS.fullmatch(ctx.args)
        if not match:
            await ctx.reply(texts.usage_split(command, ext))
            return
        file_name = match.group(1).strip()
        parts = int(match.group(2))
        if parts < 1:
            await ctx.reply("❌ Jumlah pembagian harus lebih besar dari 0")
            return
        contacts = await self._require_contacts(ctx)
        if contacts is None:
            return

        try:
            groups = split_evenly(contacts, parts)
            label = "TXT" if ext == ".txt" else "VCF"
            await ctx.reply(f"🔄 Memulai proses pembagian {label}...")
            with self._job_dir() as workdir:
                files = [
                    await run_sync(writer, workdir, f"{file_name} {i}", group)
                    for i, group in enumerate(groups, start=1)
                ]
                outcome = await self._sender.deliver(ctx.ref, files, ctx.reply)

            await ctx.reply(texts.delivery_summary(
                len(contacts),
                outcome.success_count,
                outcome.failed_count,
                len(contacts) // parts,
                [f"• Nama File: {file_name} 1{ext} sampai {file_name} {len(files)}{ext}"],
                headline="Pembagian selesai!",
            ))
        except Exception as exc:
            logger.error("%s split error: %s", ext, exc, exc_info=True)
            await ctx.reply(texts.SPLIT_FAILED)

    async def _cmd_pv(self, ctx: CommandContext) -> None:
        await self._split_and_deliver(ctx, "pv", ".vcf", write_vcf)

    async def _cmd_pt(self, ctx: CommandContext) -> None:
        await self._split_and_deliver(ctx, "pt", ".txt", write_txt)

    # -- single-file commands ----------------------------------------------

    async def _cmd_an(self, ctx: CommandContext) -> None:
        contacts = await self._require_contacts(ctx)
        if contacts is None:
            return
        single = _AN_SINGLE_ARGS.fullmatch(ctx.args)
        dual = _AN_DUAL_ARGS.fullmatch(ctx.args)
        if not single and not dual:
            await ctx.reply(texts.USAGE_AN)
            return

        if single:
            sections = [(single.group(1).strip(), int(single.group(2)))]
            output_name = single.group(3).strip()
        else:
            sections = [
                (dual.group(1).strip(), int(dual.group(2))),
                (dual.group(3).strip(), int(dual.group(4))),
            ]
            output_name = dual.group(5).strip()

        if any(count < 1 for _, count in sections):
            await ctx.reply(
                "❌ Jumlah kontak harus lebih besar dari 0" if single
                else "❌ Jumlah admin dan navy harus lebih besar dari 0"
            )
            return
        needed = sum(count for _, count in sections)
        if len(contacts) < needed:
            await ctx.reply(
                f"❌ Jumlah kontak tidak mencukupi! Tersedia: {len(contacts)}, Dibutuhkan: {needed}"
            )
            return

        try:
            renamed: list[Contact] = []
            summary = ["✅ Konversi selesai!\n", "📊 Ringkasan:"]
            offset = 0
            for prefix, count in sections:
                renamed.extend(number_contacts(contacts[offset:offset + count], prefix))
                offset += count
                summary.append(f"• {prefix}: {count} kontak")
                summary.append(f"  Range: {prefix} 1 sampai {prefix} {count}\n")
            summary.append(f"• Nama File: {output_name}.vcf")
            summary.append(f"• Total Kontak: {needed}")

            await ctx.reply("🔄 Memulai proses konversi...")
            with self._job_dir() as workdir:
                file = await run_sync(write_vcf, workdir, output_name, renamed)
                await self._send_single(ctx, file, f"📁 {file.name} ({needed} kontak)")
            await ctx.reply("\n".join(summary))
        except Exception as exc:
            logger.error("Conversion error: %s", exc, exc_info=True)
            await ctx.reply(texts.CONVERSION_FAILED)
        finally:
            self._sessions.reset(ctx.user_id)

    async def _merge_and_send(
        self,
        ctx: CommandContext,
        command: str,
        ext: str,
        writer: Callable[[Path, str, Sequence[Contact]], FileRef],
    ) -> None:
        match = _MERGE_ARGS.fullmatch(ctx.args)
        if not match:
            await ctx.reply(texts.usage_merge(command, f"kontak{ext} dengan semua kontak"))
            return
        contacts = await self._require_contacts(ctx)
        if contacts is None:
            return

        file_name = match.group(1).strip()
        label = "TXT" if ext == ".txt" else "VCF"
        try:
            await ctx.reply(f"🔄 Memulai proses penggabungan {label}...")
            with self._job_dir() as workdir:
                file = await run_sync(writer, workdir, file_name, contacts)
                await self._send_single(ctx, file, f"📁 {file.name} ({len(contacts)} kontak)")
            await ctx.reply(
                "✅ Penggabungan selesai!\n\n"
                "📊 Ringkasan:\n"
                f"• Total Kontak: {len(contacts)}\n"
                f"• Nama File: {file.name}"
            )
        except Exception as exc:
            logger.error("%s merge error: %s", label, exc, exc_info=True)
            await ctx.reply(texts.MERGE_FAILED)

    async def _cmd_gv(self, ctx: CommandContext) -> None:
        await self._merge_and_send(ctx, "gv", ".vcf", write_vcf)

    async def _cmd_gt(self, ctx: CommandContext) -> None:
        await self._merge_and_send(ctx, "gt", ".txt", write_txt)

    async def _to_txt(self, ctx: CommandContext, command: str, source: str) -> None:
        match = _MERGE_ARGS.fullmatch(ctx.args)
        if not match:
            await ctx.reply(texts.usage_merge(command, f"kontak.txt dengan nomor dari {source}"))
            return
        if not ctx.session.has_contacts:
            await ctx.reply(f"❌ Silakan kirim file {source} terlebih dahulu!")
            return

        contacts = list(ctx.session.contacts)
        try:
            with self._job_dir() as workdir:
                file = await run_sync(write_txt, workdir, match.group(1).strip(), contacts)
                await self._send_single(ctx, file, f"📁 {file.name} ({len(contacts)} nomor)")
        except Exception as exc:
            logger.error("%s to TXT error: %s", source, exc, exc_info=True)
            await ctx.reply(f"❌ Terjadi kesalahan saat konversi {source} ke TXT.")

    async def _cmd_ct(self, ctx: CommandContext) -> None:
        await self._to_txt(ctx, "ct", "CSV")

    async def _cmd_vt(self, ctx: CommandContext) -> None:
        await self._to_txt(ctx, "vt", "VCF")

    async def _cmd_xt(self, ctx: CommandContext) -> None:
        await self._to_txt(ctx, "xt", "XLSX")

    # -- renaming uploaded VCFs --------------------------------------------

    async def _cmd_rename(self, ctx: CommandContext) -> None:
        new_name = ctx.args
        if not new_name:
            await ctx.reply(texts.USAGE_RENAME)
            return
        uploads = ctx.session.uploaded_vcards
        if not uploads:
            await ctx.reply("❌ Tidak ada file VCF yang diupload. Silakan upload file VCF terlebih dahulu.")
            return

        try:
            with self._job_dir() as workdir:
                for i, upload in enumerate(uploads, start=1):
                    path = workdir / sanitize_file_name(f"{new_name}{i}.vcf")
                    await run_sync(path.write_bytes, upload.data)
                    await self._send_single(ctx, FileRef(path=path), f"📁 {path.name}")
        finally:
            ctx.session.uploaded_vcards = []
        await ctx.reply("✅ Semua file berhasil di-rename dan dikirim ulang.")

    # -- interactive admin convert -----------------------------------------

    async def _cmd_anc(self, ctx: CommandContext) -> None:
        ctx.session.admin_convert = AdminConvertState()
        await ctx.reply("Masukkan nomor admin (satu nomor per baris):")

    async def _admin_convert_step(self, ctx: CommandContext) -> None:
        state = ctx.session.admin_convert
        text = ctx.text.strip()

        if state.step == 1:
            numbers = [re.sub(r"[^\d+]", "", n.strip()) for n in ctx.text.splitlines() if n.strip()]
            numbers = [n for n in numbers if 10 <= len(n) <= 15]
            if not numbers:
                await ctx.reply("Nomor admin tidak valid. Masukkan ulang, satu nomor per baris.")
                return
            state.numbers = numbers
            state.step = 2
            await ctx.reply("Masukkan nama kontak admin (misal: Admin, 👑 Admin, dsb):")
            return

        if state.step == 2:
            if not text:
                await ctx.reply("Nama kontak admin tidak boleh kosong. Masukkan ulang:")
                return
            state.contact_name = text
            state.step = 3
            await ctx.reply("Masukkan nama file output (tanpa .vcf, misal: admin, admin2024, dsb):")
            return

        if not text:
            await ctx.reply("Nama file tidak boleh kosong. Masukkan ulang:")
            return
        contacts = [
            Contact(name=f"{state.contact_name} {i}", phone=n if n.startswith("+") else f"+{n}")
            for i, n in enumerate(state.numbers, start=1)
        ]
        ctx.session.admin_convert = None
        with self._job_dir() as workdir:
            file = await run_sync(write_vcf, workdir, text, contacts)
            await self._send_single(ctx, file, f"📁 {file.name} ({len(contacts)} admin)")
        await ctx.reply("✅ File admin berhasil dibuat dan dikirim.")
