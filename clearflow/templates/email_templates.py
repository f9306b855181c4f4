from html import escape

STATUS_COLORS = {
    'approved': '#27ae60',
    'rejected': '#e74c3c',
    'in_progress': '#667eea',
    'pending': '#f39c12',
    'paid': '#27ae60',
    'unpaid': '#e74c3c',
}


def get_status_email_template(full_name: str, headline: str, message: str,
                              application_id: str, status: str) -> str:
    """
    Responsive HTML email telling a student how their certificate application moved.
    Table layout keeps it readable in Gmail, Outlook and Yahoo.
    """
    color = STATUS_COLORS.get(status, '#667eea')
    status_label = status.replace('_', ' ').title()
    return f"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <meta http-equiv="X-UA-Compatible" content="IE=edge">
    <title>{escape(headline)}</title>
</head>
<body style="margin: 0; padding: 0; font-family: Arial, Helvetica, sans-serif; background-color: #f4f6fa;">
    <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%" style="background-color: #f4f6fa;">
        <tr>
            <td align="center" style="padding: 20px 0;">
                <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="600" style="max-width: 600px; width: 100%; background-color: #ffffff; border-radius: 12px; overflow: hidden;">
                    <tr>
                        <td style="padding: 30px 40px;">
                            <h1 style="margin: 0 0 20px 0; font-size: 22px; font-weight: 600; color: #2c3e50; text-align: center;">
                                Hello, {escape(full_name)}!
                            </h1>
                            <p style="margin: 0 0 20px 0; font-size: 16px; color: #555555; text-align: center;">
                                {escape(headline)}
                            </p>
                            <div style="text-align: center; padding-bottom: 20px;">
                                <span style="display: inline-block; background-color: {color}; color: #ffffff; padding: 10px 24px; border-radius: 20px; font-weight: bold;">
                                    {escape(status_label)}
                                </span>
                            </div>
                            <div style="background-color: #f8f9fa; border-left: 4px solid {color}; padding: 15px; border-radius: 5px;">
                                <p style="margin: 0; font-size: 14px; color: #495057; line-height: 1.5;">
                                    {escape(message)}
                                </p>
                            </div>
                            <p style="margin: 20px 0 0 0; font-size: 12px; color: #6c757d; text-align: center;">
                                Application reference: {escape(application_id)}
                            </p>
                        </td>
                    </tr>
                    <tr>
                        <td align="center" style="padding: 20px 40px 30px 40px; background-color: #f8f9fa; border-top: 1px solid #e9ecef;">
                            <p style="margin: 0; font-size: 12px; color: #6c757d;">
                                Certificate Clearance Office<br>
                                This is an automated message, please do not reply.
                            </p>
                        </td>
                    </tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>
"""
