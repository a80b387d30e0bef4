"""User-facing message templates (Indonesian, as the bot's users expect)."""

from __future__ import annotations

WELCOME = (
    "Selamat datang! Saya bisa memproses file kontak anda (xlsx, csv, txt, atau vcf).\n\n"
    "Panduan Penggunaan:\n"
    "1. Kirim file kontak\n"
    "2. Pilih perintah konversi yang diinginkan\n"
    "3. Ulangi untuk file lain atau /clear untuk mulai baru\n\n"
    "Perintah:\n"
    "• /menu - Lihat semua perintah\n"
    "• /clear - Hapus semua kontak yang sudah diproses"
)

MENU = """╔═══════════════════════
║ 📱 KONVERTER KONTAK - MENU FITUR
╠═══════════════════════
║ ✅ Kirim file kontak (xlsx, csv, txt, vcf)
║ ✅ Pilih perintah konversi
║ ✅ Ulangi untuk file lain atau /clear
╠═══════════════════════
║ 🔄 KONVERSI VCF
║ /cv <nama_kontak> <nomor_bagi> <nama_output> <nomor_awal>
║ /an <nama_admin> <jumlah_admin> <nama_navy> <jumlah_navy> <nama_output>
║ /pv <nama_file> <jumlah_bagi>
║ /gv <nama_file>
╠═══════════════════════
║ 📝 KONVERSI TXT
║ /pt <nama_file> <jumlah_bagi>
║ /gt <nama_file>
║ /ct <nama_file>
║ /vt <nama_file>
║ /xt <nama_file>
╠═══════════════════════
║ 🏷️ RENAME FILE VCF
║ Upload beberapa file VCF, lalu:
║ /rename <nama_baru>
║ (Akan dikirim ulang: nama_baru1.vcf, dst)
╠═══════════════════════
║ 👑 ADMIN CONVERT INTERAKTIF
║ /anc
║ (Input nomor admin satu per baris, lalu nama kontak, lalu nama file)
╠═══════════════════════
║ 👥 USER MANAGEMENT
║ /id
║ /add <user_id>
║ /remove <user_id>
╠═══════════════════════
║ 🧹 LAINNYA
║ /clear
╚═══════════════════════"""


def processed_box(total_contacts: int) -> str:
    return (
        "╔═══════════════════════\n"
        "║ 📱 KONVERTER KONTAK\n"
        "╠═══════════════════════\n"
        "║ ✅ File berhasil diproses\n"
        f"║ 📊 Total kontak: {total_contacts}\n"
        "╠═══════════════════════\n"
        "║ 🔄 KONVERSI VCF\n"
        "║ /cv » Bagi & Rename\n"
        "║ /an » Admin & Navy\n"
        "║ /pv » Bagi file\n"
        "║ /gv » Gabung semua\n"
        "╠═══════════════════════\n"
        "║ 📝 KONVERSI TXT\n"
        "║ /pt » Bagi nomor\n"
        "║ /gt » Gabung semua\n"
        "║ /ct » CSV ke TXT\n"
        "║ /vt » VCF ke TXT\n"
        "║ /xt » XLSX ke TXT\n"
        "╠═══════════════════════\n"
        "║ 👥 USER MANAGEMENT\n"
        "║ /id  » Lihat ID\n"
        "║ /add » Tambah user\n"
        "║ /remove » Hapus user\n"
        "╚═══════════════════════"
    )


NEED_CONTACTS = "❌ Silakan kirim file kontak terlebih dahulu!"
ADMIN_ONLY = "❌ Perintah ini hanya untuk admin."
NOT_AUTHORIZED = "❌ Anda tidak memiliki akses ke bot ini. Kirim /id lalu minta admin menambahkan ID anda."
CONVERSION_FAILED = "❌ Terjadi kesalahan saat konversi."
SPLIT_FAILED = "❌ Terjadi kesalahan saat membagi file."
MERGE_FAILED = "❌ Terjadi kesalahan saat menggabungkan file."
UPLOAD_FAILED = "❌ Terjadi kesalahan saat memproses file. Silakan coba lagi."
INVALID_FORMAT = "❌ Format file tidak valid. Harap kirim file .txt, .xlsx, .csv, atau .vcf"
PROCESSING = "📝 Memproses file..."
GENERIC_ERROR = "An error occurred while processing your request."
SESSION_CLEARED = "🗑️ Sesi dibersihkan. Anda dapat mengirim file baru."

USAGE_CV = (
    "Format: /cv <nama_kontak> <nomor_bagi> <nama_output> <nomor_awal>\n"
    "Contoh: /cv Member 3 Group 1\n\n"
    "Hasil:\n"
    "• Nama kontak: Member 1, Member 2, dst\n"
    "• Dibagi: 3 file\n"
    "• Nama file: Group 1.vcf dst\n"
    "• Mulai dari: nomor 1"
)
USAGE_AN = (
    "Format:\n"
    "1. Satu grup:\n"
    "   /an <nama_grup> <jumlah> <nama_output>\n"
    "   Contoh: /an Admin 5 Staff\n\n"
    "2. Dua grup:\n"
    "   /an <nama_admin> <jumlah_admin> <nama_navy> <jumlah_navy> <nama_output>\n"
    "   Contoh: /an Admin 2 Navy 3 Staff"
)
USAGE_RENAME = "Format: /rename <nama_baru>\nContoh: /rename kontak"


def usage_split(command: str, ext: str) -> str:
    return (
        f"Format: /{command} <nama_file> <jumlah_bagi>\n"
        f"Contoh: /{command} kontak 3\n\n"
        f"Hasil: kontak 1{ext}, kontak 2{ext}, kontak 3{ext}"
    )


def usage_merge(command: str, result: str) -> str:
    return (
        f"Format: /{command} <nama_file>\n"
        f"Contoh: /{command} kontak\n\n"
        f"Hasil: {result}"
    )


def delivery_summary(
    total_contacts: int,
    success_count: int,
    failed_count: int,
    per_file: int,
    extra_lines: list[str],
    *,
    headline: str,
) -> str:
    lines = [
        f"✅ {headline}\n",
        "📊 Ringkasan:",
        f"• Total Kontak: {total_contacts}",
        f"• Berhasil Terkirim: {success_count} file",
        f"• Gagal Terkirim: {failed_count} file",
        *extra_lines,
        f"• Kontak per File: ~{per_file}",
    ]
    return "\n".join(lines)
